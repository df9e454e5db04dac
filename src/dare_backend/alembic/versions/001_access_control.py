"""access control tables

Revision ID: 001_access_control
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_access_control'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'permission',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('resource', sa.String(length=100), nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=4096), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_permission'),
        sa.UniqueConstraint('resource', 'action', name='uq_permission_resource_action'),
    )

    op.create_table(
        'role',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('name_key', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=4096), nullable=True),
        sa.Column('is_system', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('is_editable', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_role'),
    )
    op.create_index('ix_role_name_key', 'role', ['name_key'], unique=True)

    op.create_table(
        'role_grant',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('role_id', sa.Integer(), nullable=False),
        sa.Column('resource', sa.String(length=100), nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['role_id'], ['role.id'], name='fk_role_grant_role_id_role', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['resource', 'action'], ['permission.resource', 'permission.action'],
            name='fk_role_grant_resource_permission',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_role_grant'),
        sa.UniqueConstraint('role_id', 'resource', 'action', name='uq_role_grant_role_id_resource_action'),
    )
    op.create_index('ix_role_grant_role_id', 'role_grant', ['role_id'])

    op.create_table(
        'role_assignment',
        sa.Column('principal_id', sa.String(length=255), nullable=False),
        sa.Column('role_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['role_id'], ['role.id'], name='fk_role_assignment_role_id_role', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('principal_id', 'role_id', name='pk_role_assignment'),
    )
    op.create_index('ix_role_assignment_principal_id', 'role_assignment', ['principal_id'])
    op.create_index('ix_role_assignment_role_id', 'role_assignment', ['role_id'])

    op.create_table(
        'override_rule',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('role_name_pattern', sa.String(length=100), nullable=False),
        sa.Column('resource', sa.String(length=100), nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('effect', sa.String(length=16), server_default=sa.text("'deny'"), nullable=False),
        sa.Column('description', sa.String(length=4096), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_override_rule'),
        sa.UniqueConstraint('role_name_pattern', 'resource', 'action', 'effect',
                            name='uq_override_rule_pattern_resource_action_effect'),
    )
    op.create_index('ix_override_rule_role_name_pattern', 'override_rule', ['role_name_pattern'])

    op.create_table(
        'principal',
        sa.Column('id', sa.String(length=255), nullable=False),
        sa.Column('legacy_role', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_principal'),
    )


def downgrade() -> None:
    op.drop_table('principal')
    op.drop_index('ix_override_rule_role_name_pattern', table_name='override_rule')
    op.drop_table('override_rule')
    op.drop_index('ix_role_assignment_role_id', table_name='role_assignment')
    op.drop_index('ix_role_assignment_principal_id', table_name='role_assignment')
    op.drop_table('role_assignment')
    op.drop_index('ix_role_grant_role_id', table_name='role_grant')
    op.drop_table('role_grant')
    op.drop_index('ix_role_name_key', table_name='role')
    op.drop_table('role')
    op.drop_table('permission')
