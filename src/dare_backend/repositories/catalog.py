from typing import List, Optional
from sqlalchemy.orm import Session

from dare_backend.model.permission import OverrideRule, Permission
from dare_backend.repositories.base import BaseRepository


class PermissionRepository(BaseRepository[Permission]):

    def __init__(self, db: Session):
        super().__init__(db, Permission)

    def get(self, resource: str, action: str) -> Optional[Permission]:
        return self.find_one_by(resource=resource, action=action)

    def list_all(self) -> List[Permission]:
        return (
            self.db.query(Permission)
            .order_by(Permission.resource, Permission.action)
            .all()
        )


class OverrideRuleRepository(BaseRepository[OverrideRule]):

    def __init__(self, db: Session):
        super().__init__(db, OverrideRule)

    def get(self, pattern: str, resource: str, action: str, effect: str) -> Optional[OverrideRule]:
        return self.find_one_by(
            role_name_pattern=pattern, resource=resource, action=action, effect=effect
        )

    def list_all(self) -> List[OverrideRule]:
        return (
            self.db.query(OverrideRule)
            .order_by(OverrideRule.role_name_pattern, OverrideRule.resource, OverrideRule.action)
            .all()
        )
