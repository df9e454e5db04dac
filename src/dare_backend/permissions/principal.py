from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

from dare_backend.settings import settings
from dare_backend.utils import normalize_role_name


class Principal(BaseModel):
    """Authenticated actor whose access is being decided.

    ``legacy_role`` is the single role label kept on the user record. It
    drives the administrative bypass and is compared against override rule
    patterns, independently of role assignments.
    """

    user_id: str = Field(description="Stable principal identifier")
    legacy_role: Optional[str] = Field(None, description="Legacy single-role label")

    model_config = ConfigDict(frozen=True)

    @property
    def legacy_role_key(self) -> Optional[str]:
        return normalize_role_name(self.legacy_role)

    @property
    def is_admin(self) -> bool:
        """Administrative bypass: legacy label equals the canonical admin name"""
        return self.legacy_role_key == normalize_role_name(settings.ADMIN_ROLE_NAME)

    def cache_key(self) -> Tuple[str, Optional[str]]:
        return (self.user_id, self.legacy_role_key)
