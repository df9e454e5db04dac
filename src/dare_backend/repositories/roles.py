from typing import List, Optional, Set
from sqlalchemy.orm import Session

from dare_backend.model.role import Role, RoleAssignment, RoleGrant
from dare_backend.utils import normalize_role_name
from dare_backend.repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):

    def __init__(self, db: Session):
        super().__init__(db, Role)

    def get_by_name(self, name: str) -> Optional[Role]:
        key = normalize_role_name(name)
        if key is None:
            return None
        return self.find_one_by(name_key=key)

    def get_for_update(self, role_id: int) -> Optional[Role]:
        """Load a role row locked for the rest of the transaction"""
        return (
            self.db.query(Role)
            .filter(Role.id == role_id)
            .with_for_update()
            .first()
        )

    def list_roles(self) -> List[Role]:
        return self.db.query(Role).order_by(Role.name_key).all()

    def get_many(self, role_ids: Set[int]) -> List[Role]:
        if not role_ids:
            return []
        return self.db.query(Role).filter(Role.id.in_(role_ids)).all()


class GrantRepository(BaseRepository[RoleGrant]):

    def __init__(self, db: Session):
        super().__init__(db, RoleGrant)

    def get(self, role_id: int, resource: str, action: str) -> Optional[RoleGrant]:
        return self.find_one_by(role_id=role_id, resource=resource, action=action)

    def for_role(self, role_id: int) -> List[RoleGrant]:
        return (
            self.db.query(RoleGrant)
            .filter(RoleGrant.role_id == role_id)
            .order_by(RoleGrant.resource, RoleGrant.action)
            .all()
        )


class AssignmentRepository(BaseRepository[RoleAssignment]):

    def __init__(self, db: Session):
        super().__init__(db, RoleAssignment)

    def get(self, principal_id: str, role_id: int) -> Optional[RoleAssignment]:
        return self.db.get(RoleAssignment, (principal_id, role_id))

    def role_ids_for(self, principal_id: str) -> Set[int]:
        rows = (
            self.db.query(RoleAssignment.role_id)
            .filter(RoleAssignment.principal_id == principal_id)
            .all()
        )
        return {row[0] for row in rows}
