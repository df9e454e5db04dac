from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint, func, text

from .base import Base


class Permission(Base):
    __tablename__ = 'permission'
    __table_args__ = (
        UniqueConstraint('resource', 'action', name='uq_permission_resource_action'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    resource = Column(String(100), nullable=False)
    action = Column(String(50), nullable=False)
    description = Column(String(4096))
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())


class OverrideRule(Base):
    __tablename__ = 'override_rule'
    __table_args__ = (
        UniqueConstraint('role_name_pattern', 'resource', 'action', 'effect',
                         name='uq_override_rule_pattern_resource_action_effect'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    # stored lower-cased, matched case-insensitively
    role_name_pattern = Column(String(100), nullable=False, index=True)
    resource = Column(String(100), nullable=False)
    action = Column(String(50), nullable=False)
    effect = Column(String(16), nullable=False, server_default=text("'deny'"))
    description = Column(String(4096))
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
