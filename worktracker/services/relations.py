from typing import Dict, List, Optional

from ..store.table_store import TableStore, unique


def profiles_by_user(store: TableStore, user_ids: List[str]) -> Dict[str, dict]:
    if not user_ids:
        return {}
    rows = store.select("profiles", in_={"user_id": user_ids})
    return {p["user_id"]: p for p in rows}


def attach_reporters(store: TableStore, issues: List[dict]) -> List[dict]:
    """Second fetch for the reporters' profiles, merged in memory by user id."""
    if not issues:
        return []
    profile_map = profiles_by_user(store, unique([i.get("reported_by") for i in issues]))
    return [{**issue, "reporter": profile_map.get(issue.get("reported_by"))} for issue in issues]


def reporter_name(issue: dict) -> str:
    reporter: Optional[dict] = issue.get("reporter")
    if not reporter:
        return "Unknown"
    return reporter.get("full_name") or reporter.get("email") or "Unknown"
