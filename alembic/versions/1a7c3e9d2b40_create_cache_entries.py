"""create cache_entries

Revision ID: 1a7c3e9d2b40
Revises:
Create Date: 2026-10-18 10:12:41.208311

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '1a7c3e9d2b40'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'cache_entries',
        sa.Column('key', sa.String(length=120), nullable=False),
        sa.Column('payload', sa.Text(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('key', name='pk_cache_entries'),
    )
    op.create_index('ix_cache_entries_expires_at', 'cache_entries', ['expires_at'])

def downgrade():
    op.drop_index('ix_cache_entries_expires_at', table_name='cache_entries')
    op.drop_table('cache_entries')
