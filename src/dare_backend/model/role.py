from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, ForeignKeyConstraint, Integer, String,
    UniqueConstraint, func, text
)
from sqlalchemy.orm import relationship

from .base import Base


class Role(Base):
    __tablename__ = 'role'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    # lower-cased name, enforces case-insensitive uniqueness
    name_key = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(String(4096))
    is_system = Column(Boolean, nullable=False, server_default=text("false"))
    is_editable = Column(Boolean, nullable=False, server_default=text("true"))
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    grants = relationship('RoleGrant', back_populates='role', cascade='all, delete-orphan')
    assignments = relationship('RoleAssignment', back_populates='role', cascade='all, delete-orphan')

    @property
    def is_protected(self) -> bool:
        return bool(self.is_system) or not self.is_editable

    @property
    def state(self) -> str:
        if not self.grants and not self.assignments:
            return "draft"
        return "active"


class RoleGrant(Base):
    __tablename__ = 'role_grant'
    __table_args__ = (
        UniqueConstraint('role_id', 'resource', 'action', name='uq_role_grant_role_id_resource_action'),
        ForeignKeyConstraint(
            ['resource', 'action'], ['permission.resource', 'permission.action'],
            name='fk_role_grant_resource_permission',
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    role_id = Column(ForeignKey('role.id', ondelete='CASCADE'), nullable=False, index=True)
    resource = Column(String(100), nullable=False)
    action = Column(String(50), nullable=False)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())

    role = relationship('Role', back_populates='grants')


class RoleAssignment(Base):
    __tablename__ = 'role_assignment'

    principal_id = Column(String(255), primary_key=True, nullable=False, index=True)
    role_id = Column(ForeignKey('role.id', ondelete='CASCADE'), primary_key=True, nullable=False, index=True)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())

    role = relationship('Role', back_populates='assignments')
