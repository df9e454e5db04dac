from sqlalchemy import Column, DateTime, String, func

from .base import Base


class PrincipalRecord(Base):
    """Stable identity known to the engine, with its legacy single-role label."""
    __tablename__ = 'principal'

    id = Column(String(255), primary_key=True)
    legacy_role = Column(String(50))
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True), nullable=False, server_default=func.now(), onupdate=func.now())
