"""initial section access tables

Revision ID: 0001_initial_access
Revises:
Create Date: 2026-10-18
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_access'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('app_sections',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('key', sa.String(length=64), nullable=False, unique=True),
        sa.Column('label', sa.String(length=128), nullable=False),
        sa.Column('path', sa.String(length=255), nullable=False),
        sa.Column('group', sa.String(length=64), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('actions', sa.JSON(), nullable=True),
        sa.Column('is_enabled', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'))
    )
    op.create_index('ix_app_sections_key', 'app_sections', ['key'])

    op.create_table('roles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('key', sa.String(length=64), nullable=False, unique=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('short_name', sa.String(length=32)),
        sa.Column('description', sa.String(length=255)),
        sa.Column('is_director', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'))
    )
    op.create_index('ix_roles_key', 'roles', ['key'])

    op.create_table('role_section_access',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('roles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('section_id', sa.Integer(), sa.ForeignKey('app_sections.id', ondelete='CASCADE'), nullable=False),
        sa.Column('allowed_actions', sa.JSON(), nullable=True)
    )
    # unique constraint handled via batch for sqlite
    with op.batch_alter_table('role_section_access') as batch_op:
        batch_op.create_unique_constraint('uq_role_section', ['role_id', 'section_id'])

    op.create_table('accounts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_code', sa.String(length=32)),
        sa.Column('full_name', sa.String(length=128), nullable=False),
        sa.Column('email', sa.String(length=128), nullable=False, unique=True),
        sa.Column('phone', sa.String(length=32)),
        sa.Column('role_key', sa.String(length=64), nullable=False, server_default='EMPLOYEE'),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('login_type', sa.String(length=16), nullable=False, server_default='PASSWORD'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        sa.Column('allowed_sections', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'))
    )
    op.create_index('ix_accounts_email', 'accounts', ['email'])
    op.create_index('ix_accounts_employee_code', 'accounts', ['employee_code'])

    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('actor_account_id', sa.Integer(), nullable=False),
        sa.Column('actor_role', sa.String(length=64)),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('entity', sa.String(length=64)),
        sa.Column('entity_id', sa.String(length=64)),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'))
    )
    op.create_index('ix_audit_logs_actor_account_id', 'audit_logs', ['actor_account_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])


def downgrade():
    for tbl in ['audit_logs', 'accounts', 'role_section_access', 'roles', 'app_sections']:
        op.drop_table(tbl)
