"""create user and match_record tables

Revision ID: 5c2d9e1a7b30
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2d9e1a7b30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=64), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_user_name', 'user', ['name'], unique=True)

    if 'match_record' not in existing_tables:
        op.create_table(
            'match_record',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('date', sa.DateTime(), nullable=False),
            sa.Column('winner_id', sa.Integer(), nullable=False),
            sa.Column('score_str', sa.String(length=16), nullable=False),
            sa.Column('timeline', sa.Text(), nullable=True),
            sa.Column('players', sa.Text(), nullable=False),
        )
        op.create_index('ix_match_record_date', 'match_record', ['date'])


def downgrade():
    op.drop_index('ix_match_record_date', table_name='match_record')
    op.drop_table('match_record')
    op.drop_index('ix_user_name', table_name='user')
    op.drop_table('user')
