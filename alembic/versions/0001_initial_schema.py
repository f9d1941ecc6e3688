"""initial clinic schema

Revision ID: 0001
Revises:
Create Date: 2026-10-16 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


user_role = sa.Enum('admin', 'health_worker', name='user_role')
age_group = sa.Enum('infant', 'child', 'pregnant', 'elderly', 'adult', name='age_group')
vaccination_status = sa.Enum('scheduled', 'completed', 'missed', 'overdue', name='vaccination_status')
appointment_status = sa.Enum('scheduled', 'completed', 'cancelled', 'rescheduled', name='appointment_status')
appointment_type = sa.Enum('routine', 'followup', 'new', name='appointment_type')


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('idx_users_role_active', 'users', ['role', 'is_active'])

    op.create_table(
        'patient_sequence',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sqlite_autoincrement=True,
    )

    op.create_table(
        'patients',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('patient_id', sa.String(20), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('gender', sa.String(10), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('guardian_name', sa.String(255), nullable=True),
        sa.Column('guardian_phone', sa.String(20), nullable=True),
        sa.Column('age_group', age_group, nullable=False),
        sa.Column('qr_code', sa.String(64), nullable=True),
        sa.Column('medical_history', sa.Text(), nullable=True),
        sa.Column('allergies', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
    )
    op.create_index('ix_patients_id', 'patients', ['id'])
    op.create_index('ix_patients_patient_id', 'patients', ['patient_id'], unique=True)
    op.create_index('ix_patients_qr_code', 'patients', ['qr_code'], unique=True)
    op.create_index('idx_patients_name', 'patients', ['name'])
    op.create_index('idx_patients_created_at', 'patients', ['created_at'])

    op.create_table(
        'vaccines',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('age_group', sa.String(20), nullable=False),
        sa.Column('doses_required', sa.Integer(), nullable=True),
        sa.Column('interval_days', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
    )
    op.create_index('ix_vaccines_id', 'vaccines', ['id'])

    op.create_table(
        'vaccinations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('patient_id', sa.Integer(), sa.ForeignKey('patients.id'), nullable=False),
        sa.Column('vaccine_id', sa.Integer(), sa.ForeignKey('vaccines.id'), nullable=False),
        sa.Column('dose_number', sa.Integer(), nullable=False),
        sa.Column('scheduled_date', sa.Date(), nullable=True),
        sa.Column('administered_date', sa.Date(), nullable=True),
        sa.Column('status', vaccination_status, nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('administered_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_vaccinations_id', 'vaccinations', ['id'])
    op.create_index('idx_vaccinations_status_scheduled', 'vaccinations', ['status', 'scheduled_date'])
    op.create_index('idx_vaccinations_patient', 'vaccinations', ['patient_id'])

    op.create_table(
        'appointments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('patient_id', sa.Integer(), sa.ForeignKey('patients.id'), nullable=False),
        sa.Column('vaccination_id', sa.Integer(), sa.ForeignKey('vaccinations.id'), nullable=True),
        sa.Column('appointment_date', sa.DateTime(), nullable=False),
        sa.Column('appointment_time', sa.String(5), nullable=False),
        sa.Column('status', appointment_status, nullable=False),
        sa.Column('type', appointment_type, nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_appointments_id', 'appointments', ['id'])
    op.create_index('idx_appointments_date', 'appointments', ['appointment_date'])


def downgrade():
    op.drop_table('appointments')
    op.drop_table('vaccinations')
    op.drop_table('vaccines')
    op.drop_table('patients')
    op.drop_table('patient_sequence')
    op.drop_table('users')
    bind = op.get_bind()
    for enum_type in (appointment_type, appointment_status, vaccination_status, age_group, user_role):
        enum_type.drop(bind, checkfirst=True)
