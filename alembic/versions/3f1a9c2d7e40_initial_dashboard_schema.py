"""Initial dashboard schema: team_members, imports, activities, prospects

Revision ID: 3f1a9c2d7e40
Revises:
Create Date: 2026-01-16 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7e40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVITY_TYPES = ('emails', 'calls', 'meetings', 'proposals')
STAGES = ('cold', 'contacted', 'meeting', 'proposal', 'won', 'lost')


def upgrade() -> None:
    op.create_table('team_members',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table('imports',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('team_member_id', sa.Integer(), nullable=False),
        sa.Column('exported_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('week_start', sa.Date(), nullable=True),
        sa.Column('raw_snapshot', sa.JSON(), nullable=False),
        sa.Column('is_current', sa.Boolean(), nullable=False),
        sa.Column('targets', sa.JSON(), nullable=False),
        sa.Column('activity_count', sa.JSON(), nullable=False),
        sa.Column('prospect_count', sa.Integer(), nullable=False),
        sa.Column('won_count', sa.Integer(), nullable=False),
        sa.Column('won_revenue', sa.Float(), nullable=False),
        sa.Column('imported_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['team_member_id'], ['team_members.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_imports_team_member_id', 'imports', ['team_member_id'])
    # At most one current import per member
    op.create_index(
        'uq_imports_one_current_per_member', 'imports', ['team_member_id'], unique=True,
        sqlite_where=sa.text('is_current'), postgresql_where=sa.text('is_current'),
    )

    op.create_table('activities',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('import_id', sa.Integer(), nullable=False),
        sa.Column('team_member_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.Enum(*ACTIVITY_TYPES, name='activity_type'), nullable=False),
        sa.Column('name', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=True),
        sa.Column('week_of', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['import_id'], ['imports.id']),
        sa.ForeignKeyConstraint(['team_member_id'], ['team_members.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_activities_import_id', 'activities', ['import_id'])
    op.create_index('ix_activities_team_member_id', 'activities', ['team_member_id'])

    op.create_table('prospects',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('import_id', sa.Integer(), nullable=False),
        sa.Column('team_member_id', sa.Integer(), nullable=False),
        sa.Column('company', sa.Text(), nullable=True),
        sa.Column('contact', sa.Text(), nullable=True),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('stage', sa.Enum(*STAGES, name='prospect_stage'), nullable=False),
        sa.Column('deal_value', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_touch', sa.DateTime(timezone=True), nullable=True),
        sa.Column('won_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['import_id'], ['imports.id']),
        sa.ForeignKeyConstraint(['team_member_id'], ['team_members.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_prospects_import_id', 'prospects', ['import_id'])
    op.create_index('ix_prospects_team_member_id', 'prospects', ['team_member_id'])


def downgrade() -> None:
    op.drop_index('ix_prospects_team_member_id', 'prospects')
    op.drop_index('ix_prospects_import_id', 'prospects')
    op.drop_table('prospects')
    op.drop_index('ix_activities_team_member_id', 'activities')
    op.drop_index('ix_activities_import_id', 'activities')
    op.drop_table('activities')
    op.drop_index('uq_imports_one_current_per_member', 'imports')
    op.drop_index('ix_imports_team_member_id', 'imports')
    op.drop_table('imports')
    op.drop_table('team_members')
    sa.Enum(name='prospect_stage').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='activity_type').drop(op.get_bind(), checkfirst=True)
