"""create otps and applications

Revision ID: a1f3c9d2b7e4
Revises:
Create Date: 2026-10-16 10:12:41.204518

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1f3c9d2b7e4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    applications = op.create_table(
        'applications',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('description', sa.String(255), nullable=True),
        sa.Column('attempts_allowed', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        'otps',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('customer_id', sa.String(64), nullable=False),
        sa.Column('msisdn', sa.String(20), nullable=False),
        sa.Column('pin', sa.Integer(), nullable=False),
        sa.Column('created_on', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('expires', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('status', sa.String(32), nullable=False),
        sa.Column('attempt_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('application_id', sa.String(32), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_otps_msisdn', 'otps', ['msisdn'])

    op.bulk_insert(applications, [
        {'id': 'PPR', 'description': 'Default OTP application', 'attempts_allowed': 3},
    ])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_otps_msisdn', table_name='otps')
    op.drop_table('otps')
    op.drop_table('applications')
