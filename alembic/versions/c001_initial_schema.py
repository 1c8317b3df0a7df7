"""Create sessions, participants, drafts, payment proofs and session hosts

Revision ID: c001_initial_schema
Revises:
Create Date: 2026-10-19

This migration creates the full schema:
- sessions: hosted sessions and their public invite code
- participants: one RSVP row per (session, visitor key)
- session_drafts: saved editor state, capped per user
- payment_proofs: uploaded transfer screenshots and cash records
- session_hosts: owner and invited co-hosts
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'c001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'sessions',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('host_id', sa.String(), nullable=False),
        sa.Column('host_name', sa.String(120), nullable=True),
        sa.Column('host_slug', sa.String(120), nullable=True),

        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(300), nullable=True),
        sa.Column('map_url', sa.String(2048), nullable=True),
        sa.Column('sport', sa.String(20), nullable=False, server_default='badminton'),
        sa.Column('court_numbers', sa.String(100), nullable=True),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=True),

        # NULL capacity means unlimited
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=True),
        sa.Column('currency', sa.String(3), nullable=True),
        sa.Column('cover_url', sa.String(2048), nullable=True),

        # Payment instructions shown to guests
        sa.Column('payment_bank_name', sa.String(120), nullable=True),
        sa.Column('payment_account_number', sa.String(64), nullable=True),
        sa.Column('payment_account_name', sa.String(120), nullable=True),
        sa.Column('payment_notes', sa.Text(), nullable=True),

        sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
        sa.Column('public_code', sa.String(16), nullable=True),
        sa.Column('waitlist_enabled', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('capacity IS NULL OR capacity >= 1', name='check_session_capacity_positive'),
    )
    op.create_index('ix_sessions_host_id', 'sessions', ['host_id'])
    op.create_index('ix_sessions_public_code', 'sessions', ['public_code'], unique=True)
    op.create_index('ix_sessions_host_status', 'sessions', ['host_id', 'status'])
    op.create_index('ix_sessions_status_start_end', 'sessions', ['status', 'start_at', 'end_at'])

    op.create_table(
        'participants',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('session_id', sa.String(), sa.ForeignKey('sessions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('display_name', sa.String(80), nullable=False),
        sa.Column('contact_phone', sa.String(32), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='confirmed'),
        sa.Column('guest_key', sa.String(128), nullable=False),
        sa.Column('is_host', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('pull_out_reason', sa.Text(), nullable=True),
        sa.Column('pull_out_seen', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('session_id', 'guest_key', name='unique_session_guest_key'),
    )
    op.create_index('ix_participants_session_id', 'participants', ['session_id'])
    op.create_index('ix_participants_session_status', 'participants', ['session_id', 'status'])

    op.create_table(
        'session_drafts',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('source_session_id', sa.String(), sa.ForeignKey('sessions.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_session_drafts_user_id', 'session_drafts', ['user_id'])
    op.create_index('ix_session_drafts_user_updated', 'session_drafts', ['user_id', 'updated_at'])

    op.create_table(
        'payment_proofs',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('session_id', sa.String(), sa.ForeignKey('sessions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('participant_id', sa.String(), sa.ForeignKey('participants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('proof_image_url', sa.String(2048), nullable=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=True),
        sa.Column('currency', sa.String(3), nullable=True),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='pending_review'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_payment_proofs_session_id', 'payment_proofs', ['session_id'])
    op.create_index('ix_payment_proofs_participant_id', 'payment_proofs', ['participant_id'])
    op.create_index('ix_payment_proofs_session_status', 'payment_proofs', ['session_id', 'payment_status'])

    op.create_table(
        'session_hosts',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('session_id', sa.String(), sa.ForeignKey('sessions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('email', sa.String(320), nullable=True),
        sa.Column('user_id', sa.String(), nullable=True),
        sa.Column('role', sa.String(10), nullable=False),
        sa.Column('invited_by', sa.String(), nullable=True),
        sa.Column('invited_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('accepted_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('session_id', 'email', name='unique_session_host_email'),
    )
    op.create_index('ix_session_hosts_session_id', 'session_hosts', ['session_id'])
    op.create_index('ix_session_hosts_email', 'session_hosts', ['email'])
    op.create_index('ix_session_hosts_user_id', 'session_hosts', ['user_id'])


def downgrade() -> None:
    op.drop_table('session_hosts')
    op.drop_table('payment_proofs')
    op.drop_table('session_drafts')
    op.drop_table('participants')
    op.drop_table('sessions')
