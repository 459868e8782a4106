"""Create users, invites and relationships tables

Revision ID: 3f1c9a7d2b64
Revises:
Create Date: 2025-06-02 10:14:31.482910

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b64'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

RELATIONSHIP_TYPES = ('DATING', 'MARRIED', 'SITUATIONSHIP')
INVITE_STATUSES = ('PENDING', 'ACCEPTED', 'DECLINED', 'CANCELLED')
RELATIONSHIP_STATUSES = (
    'DATING', 'ENGAGED', 'MARRIED', 'SEPARATED', 'WIDOWED', 'SITUATIONSHIP',
    'FRIENDS_WITH_BENEFITS', 'ON_A_BREAK', 'OPEN_RELATIONSHIP', 'POLYAMOROUS',
)


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('phone', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('verification_code', sa.String(length=4), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_phone', 'users', ['phone'], unique=True)

    op.create_table(
        'invites',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('sender_phone', sa.String(), sa.ForeignKey('users.phone'), nullable=False),
        sa.Column('recipient_phone', sa.String(), nullable=False),
        sa.Column('relationship_type', sa.Enum(*RELATIONSHIP_TYPES, name='relationshiptype'), nullable=False),
        sa.Column('status', sa.Enum(*INVITE_STATUSES, name='invitestatus'), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('sender_phone', 'recipient_phone', name='uq_invites_sender_recipient'),
    )
    op.create_index('ix_invites_id', 'invites', ['id'])
    op.create_index('ix_invites_sender_phone', 'invites', ['sender_phone'])
    op.create_index('ix_invites_recipient_phone', 'invites', ['recipient_phone'])

    op.create_table(
        'relationships',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('status', sa.Enum(*RELATIONSHIP_STATUSES, name='relationshipstatus'), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_relationships_id', 'relationships', ['id'])
    op.create_index('ix_relationships_end_date', 'relationships', ['end_date'])

    op.create_table(
        'relationship_users',
        sa.Column('relationship_id', sa.String(), sa.ForeignKey('relationships.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    )

def downgrade() -> None:
    op.drop_table('relationship_users')
    op.drop_table('relationships')
    op.drop_table('invites')
    op.drop_table('users')
    op.execute('DROP TYPE relationshipstatus')
    op.execute('DROP TYPE invitestatus')
    op.execute('DROP TYPE relationshiptype')
