# rural_health/models.py
from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Text, Date,
    Enum as SQLAlchemyEnum, Boolean, Index
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base
import enum


def _enum_values(enum_cls):
    # Persist the lowercase values ("health_worker"), not the member names
    return [member.value for member in enum_cls]


class UserRole(str, enum.Enum):
    admin = "admin"
    health_worker = "health_worker"

class AgeGroup(str, enum.Enum):
    infant = "infant"
    child = "child"
    pregnant = "pregnant"
    elderly = "elderly"
    adult = "adult"

class VaccinationStatus(str, enum.Enum):
    scheduled = "scheduled"
    completed = "completed"
    missed = "missed"
    overdue = "overdue"

class AppointmentStatus(str, enum.Enum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"
    rescheduled = "rescheduled"

class AppointmentType(str, enum.Enum):
    routine = "routine"
    followup = "followup"
    new = "new"


class User(Base):
    """Health worker or administrator account"""
    __tablename__ = "users"
    __table_args__ = (
        Index('idx_users_role_active', 'role', 'is_active'),
    )

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(SQLAlchemyEnum(UserRole, name='user_role', values_callable=_enum_values), default=UserRole.health_worker, nullable=False)
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    created_patients = relationship("Patient", back_populates="creator", foreign_keys="Patient.created_by")
    administered_vaccinations = relationship("Vaccination", back_populates="administrator")
    created_appointments = relationship("Appointment", back_populates="creator")


class PatientSequence(Base):
    """One row per registered patient; its id is the numeric part of Patient.patient_id."""
    __tablename__ = "patient_sequence"
    # Never reuse a number, even if the highest row were removed
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Patient(Base):
    __tablename__ = "patients"
    __table_args__ = (
        Index('idx_patients_name', 'name'),
        Index('idx_patients_created_at', 'created_at'),
    )

    id = Column(Integer, primary_key=True, index=True)
    # Human readable identifier, e.g. RH000123. Generated once, never updated.
    patient_id = Column(String(20), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(10), nullable=True)
    address = Column(Text, nullable=True)
    guardian_name = Column(String(255), nullable=True)
    guardian_phone = Column(String(20), nullable=True)
    age_group = Column(SQLAlchemyEnum(AgeGroup, name='age_group', values_callable=_enum_values), nullable=False)
    qr_code = Column(String(64), unique=True, index=True, nullable=True)
    medical_history = Column(Text, nullable=True)
    allergies = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    creator = relationship("User", back_populates="created_patients", foreign_keys=[created_by])
    vaccinations = relationship("Vaccination", back_populates="patient")
    appointments = relationship("Appointment", back_populates="patient")


class Vaccine(Base):
    __tablename__ = "vaccines"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    age_group = Column(String(20), nullable=False)
    doses_required = Column(Integer, default=1)
    interval_days = Column(Integer, nullable=True)  # days between doses
    is_active = Column(Boolean, default=True)

    vaccinations = relationship("Vaccination", back_populates="vaccine")


class Vaccination(Base):
    """A single scheduled or administered dose."""
    __tablename__ = "vaccinations"
    __table_args__ = (
        Index('idx_vaccinations_status_scheduled', 'status', 'scheduled_date'),
        Index('idx_vaccinations_patient', 'patient_id'),
    )

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)
    vaccine_id = Column(Integer, ForeignKey("vaccines.id"), nullable=False)
    dose_number = Column(Integer, nullable=False)
    scheduled_date = Column(Date, nullable=True)
    administered_date = Column(Date, nullable=True)
    status = Column(SQLAlchemyEnum(VaccinationStatus, name='vaccination_status', values_callable=_enum_values), default=VaccinationStatus.scheduled, nullable=False)
    notes = Column(Text, nullable=True)
    administered_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    patient = relationship("Patient", back_populates="vaccinations")
    vaccine = relationship("Vaccine", back_populates="vaccinations")
    administrator = relationship("User", back_populates="administered_vaccinations")
    appointments = relationship("Appointment", back_populates="vaccination")


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index('idx_appointments_date', 'appointment_date'),
    )

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)
    vaccination_id = Column(Integer, ForeignKey("vaccinations.id"), nullable=True)
    appointment_date = Column(DateTime, nullable=False)
    appointment_time = Column(String(5), nullable=False)  # "HH:MM"
    status = Column(SQLAlchemyEnum(AppointmentStatus, name='appointment_status', values_callable=_enum_values), default=AppointmentStatus.scheduled, nullable=False)
    type = Column(SQLAlchemyEnum(AppointmentType, name='appointment_type', values_callable=_enum_values), nullable=False)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    patient = relationship("Patient", back_populates="appointments")
    vaccination = relationship("Vaccination", back_populates="appointments")
    creator = relationship("User", back_populates="created_appointments")
