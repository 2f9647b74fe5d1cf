"""create_event_tables

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-19

Adds:
- food_events, trigger_events, medication_events, symptom_instances
- flares and the append-only flare_events history
"""
from alembic import op
import sqlalchemy as sa

revision = '1a2b3c4d5e6f'
down_revision = None
branch_labels = None
depends_on = None

flare_status = sa.Enum('ACTIVE', 'IMPROVING', 'WORSENING', 'RESOLVED', name='flarestatus')
flare_event_type = sa.Enum(
    'CREATED', 'SEVERITY_UPDATE', 'TREND_CHANGE', 'INTERVENTION', 'RESOLVED',
    name='flareeventtype',
)


def upgrade() -> None:
    op.create_table(
        'food_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('timestamp', sa.BigInteger(), nullable=False),
        sa.Column('meal_id', sa.String(64), nullable=True),
        sa.Column('meal_type', sa.String(20), nullable=True),
        sa.Column('food_ids', sa.JSON(), nullable=False),
        sa.Column('portion_map', sa.JSON(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_food_events_user_timestamp', 'food_events', ['user_id', 'timestamp'])

    op.create_table(
        'trigger_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('trigger_id', sa.String(64), nullable=False),
        sa.Column('timestamp', sa.BigInteger(), nullable=False),
        sa.Column('intensity', sa.String(20), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_trigger_events_user_timestamp', 'trigger_events', ['user_id', 'timestamp'])

    op.create_table(
        'medication_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('medication_id', sa.String(64), nullable=False),
        sa.Column('timestamp', sa.BigInteger(), nullable=False),
        sa.Column('taken', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('dosage', sa.String(64), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'idx_medication_events_user_timestamp', 'medication_events', ['user_id', 'timestamp']
    )

    op.create_table(
        'symptom_instances',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('symptom_id', sa.String(64), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('severity', sa.Integer(), nullable=False),
        sa.Column('timestamp', sa.BigInteger(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'idx_symptom_instances_user_timestamp', 'symptom_instances', ['user_id', 'timestamp']
    )
    op.create_index('idx_symptom_instances_name', 'symptom_instances', ['name'])

    op.create_table(
        'flares',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('body_region_id', sa.String(64), nullable=False),
        sa.Column('initial_severity', sa.Integer(), nullable=False),
        sa.Column('current_severity', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.BigInteger(), nullable=False),
        sa.Column('end_date', sa.BigInteger(), nullable=True),
        sa.Column('status', flare_status, nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_flares_user_start_date', 'flares', ['user_id', 'start_date'])

    op.create_table(
        'flare_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('flare_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('event_type', flare_event_type, nullable=False),
        sa.Column('timestamp', sa.BigInteger(), nullable=False),
        sa.Column('severity', sa.Integer(), nullable=True),
        sa.Column('trend', sa.String(20), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['flare_id'], ['flares.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_flare_events_flare_id', 'flare_events', ['flare_id'])
    op.create_index('idx_flare_events_user_id', 'flare_events', ['user_id'])


def downgrade() -> None:
    op.drop_index('idx_flare_events_user_id', table_name='flare_events')
    op.drop_index('idx_flare_events_flare_id', table_name='flare_events')
    op.drop_table('flare_events')
    op.drop_index('idx_flares_user_start_date', table_name='flares')
    op.drop_table('flares')
    op.drop_index('idx_symptom_instances_name', table_name='symptom_instances')
    op.drop_index('idx_symptom_instances_user_timestamp', table_name='symptom_instances')
    op.drop_table('symptom_instances')
    op.drop_index('idx_medication_events_user_timestamp', table_name='medication_events')
    op.drop_table('medication_events')
    op.drop_index('idx_trigger_events_user_timestamp', table_name='trigger_events')
    op.drop_table('trigger_events')
    op.drop_index('idx_food_events_user_timestamp', table_name='food_events')
    op.drop_table('food_events')
    flare_event_type.drop(op.get_bind(), checkfirst=True)
    flare_status.drop(op.get_bind(), checkfirst=True)
