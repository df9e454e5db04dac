from typing import Optional


def normalize_role_name(name: Optional[str]) -> Optional[str]:
    """Case-insensitive comparison key for role names and labels"""
    if name is None:
        return None
    name = name.strip()
    return name.lower() if name else None
