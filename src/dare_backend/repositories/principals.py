from typing import Optional
from sqlalchemy.orm import Session

from dare_backend.model.principal import PrincipalRecord
from dare_backend.repositories.base import BaseRepository


class PrincipalRepository(BaseRepository[PrincipalRecord]):

    def __init__(self, db: Session):
        super().__init__(db, PrincipalRecord)

    def get(self, principal_id: str) -> Optional[PrincipalRecord]:
        return self.get_by_id_optional(principal_id)
