from typing import Optional

from ..config import settings


def known_department(value: Optional[str]) -> Optional[str]:
    """Blank means no department; anything else must be a configured one."""
    if value is None or not value.strip():
        return None
    value = value.strip()
    if value not in settings.departments:
        raise ValueError(f"department must be one of {settings.departments}")
    return value
