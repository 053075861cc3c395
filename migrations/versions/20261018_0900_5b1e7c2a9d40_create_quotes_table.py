"""create quotes table

Revision ID: 5b1e7c2a9d40
Revises:
Create Date: 2026-10-18 09:00:00.000000+00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5b1e7c2a9d40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'quotes',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('customer_portal_token', sa.String(), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_quotes_status', 'quotes', ['status'])
    op.create_index('ix_quotes_customer_portal_token', 'quotes', ['customer_portal_token'])


def downgrade() -> None:
    op.drop_index('ix_quotes_customer_portal_token', table_name='quotes')
    op.drop_index('ix_quotes_status', table_name='quotes')
    op.drop_table('quotes')
