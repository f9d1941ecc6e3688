# rural_health/crud.py - data access layer
import logging
import time
from datetime import datetime, date, timezone
from typing import Optional, List, Dict, Union

from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_, and_, func
from sqlalchemy.exc import SQLAlchemyError

from . import models, schemas
from .security import get_password_hash

logger = logging.getLogger(__name__)

PATIENT_ID_PREFIX = "RH"
PATIENT_ID_DIGITS = 6
SEARCH_RESULT_LIMIT = 20


class CRUDError(Exception):
    """A store failure (connectivity, constraint violation) surfaced to the caller."""
    pass


def utc_today() -> date:
    """Today's calendar date in UTC; the single notion of "today" for due/overdue."""
    return datetime.now(timezone.utc).date()

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def _fail(db: Session, message: str, error: SQLAlchemyError):
    db.rollback()
    logger.error(f"{message}: {error}")
    raise CRUDError(f"Database error: {message}") from error

def format_patient_id(number: int) -> str:
    return f"{PATIENT_ID_PREFIX}{number:0{PATIENT_ID_DIGITS}d}"

def format_qr_code(patient_id: str, epoch_millis: Optional[int] = None) -> str:
    if epoch_millis is None:
        epoch_millis = int(time.time() * 1000)
    return f"{PATIENT_ID_PREFIX}_{patient_id}_{epoch_millis}"


# ==================== USER OPERATIONS ====================

def get_user(db: Session, user_id: int) -> Optional[models.User]:
    """Get user by ID."""
    try:
        return db.query(models.User).filter(models.User.id == user_id).first()
    except SQLAlchemyError as e:
        _fail(db, f"fetching user {user_id}", e)

def get_user_by_username(db: Session, username: str) -> Optional[models.User]:
    try:
        return db.query(models.User).filter(models.User.username == username).first()
    except SQLAlchemyError as e:
        _fail(db, f"fetching user by username '{username}'", e)

def get_users(db: Session) -> List[models.User]:
    """All users, ordered by display name."""
    try:
        return db.query(models.User).order_by(models.User.name.asc(), models.User.id.asc()).all()
    except SQLAlchemyError as e:
        _fail(db, "fetching users", e)

def count_users(db: Session) -> int:
    try:
        return db.query(func.count(models.User.id)).scalar() or 0
    except SQLAlchemyError as e:
        _fail(db, "counting users", e)

def create_user(db: Session, user: schemas.UserCreate) -> models.User:
    """Create a user; the password is bcrypt-hashed before it reaches the store."""
    try:
        db_user = models.User(
            username=user.username,
            password_hash=get_password_hash(user.password),
            role=user.role,
            name=user.name,
            phone=user.phone,
            email=user.email,
            is_active=user.is_active,
        )
        db.add(db_user)
        db.commit()
        db.refresh(db_user)
        logger.info(f"Created user '{db_user.username}' with role {db_user.role.value}")
        return db_user
    except SQLAlchemyError as e:
        _fail(db, f"creating user '{user.username}'", e)

def update_user(db: Session, user_id: int, user_update: schemas.UserUpdate) -> Optional[models.User]:
    db_user = get_user(db, user_id=user_id)
    if not db_user:
        return None

    update_data = user_update.model_dump(exclude_unset=True)
    if "password" in update_data:
        password = update_data.pop("password")
        if password:
            update_data["password_hash"] = get_password_hash(password)

    try:
        for key, value in update_data.items():
            setattr(db_user, key, value)
        db_user.updated_at = _utcnow()
        db.commit()
        db.refresh(db_user)
        return db_user
    except SQLAlchemyError as e:
        _fail(db, f"updating user {user_id}", e)


# ==================== PATIENT OPERATIONS ====================

def get_patient(db: Session, patient_id: int) -> Optional[models.Patient]:
    """Get a single patient by primary key."""
    try:
        return db.query(models.Patient).filter(models.Patient.id == patient_id).first()
    except SQLAlchemyError as e:
        _fail(db, f"fetching patient {patient_id}", e)

def get_patient_by_patient_id(db: Session, patient_id: str) -> Optional[models.Patient]:
    """Get a patient by the printed identifier (e.g. RH000042)."""
    try:
        return db.query(models.Patient).filter(models.Patient.patient_id == patient_id).first()
    except SQLAlchemyError as e:
        _fail(db, f"fetching patient '{patient_id}'", e)

def get_patient_by_qr_code(db: Session, qr_code: str) -> Optional[models.Patient]:
    try:
        return db.query(models.Patient).filter(models.Patient.qr_code == qr_code).first()
    except SQLAlchemyError as e:
        _fail(db, "fetching patient by QR code", e)

def search_patients(db: Session, query: str) -> List[models.Patient]:
    """Case-insensitive partial match on name, phone and patient_id; at most 20 rows."""
    pattern = f"%{query}%"
    try:
        return db.query(models.Patient).filter(
            or_(
                models.Patient.name.ilike(pattern),
                models.Patient.phone.ilike(pattern),
                models.Patient.patient_id.ilike(pattern),
            )
        ).order_by(models.Patient.name.asc()).limit(SEARCH_RESULT_LIMIT).all()
    except SQLAlchemyError as e:
        _fail(db, f"searching patients for '{query}'", e)

def get_patients(db: Session, limit: int = 50, offset: int = 0) -> List[models.Patient]:
    """Newest patients first."""
    try:
        return db.query(models.Patient).order_by(
            models.Patient.created_at.desc(), models.Patient.id.desc()
        ).offset(offset).limit(limit).all()
    except SQLAlchemyError as e:
        _fail(db, "fetching patients", e)

def count_patients(db: Session) -> int:
    try:
        return db.query(func.count(models.Patient.id)).scalar() or 0
    except SQLAlchemyError as e:
        _fail(db, "counting patients", e)

def _next_patient_number(db: Session) -> int:
    # The autoincrement key hands out each number exactly once, even to
    # concurrent registrations.
    entry = models.PatientSequence()
    db.add(entry)
    db.flush()
    return entry.id

def create_patient(db: Session, patient: schemas.PatientCreate, created_by: Optional[int] = None) -> models.Patient:
    """Register a patient, assigning its RH number and QR payload."""
    try:
        patient_id = format_patient_id(_next_patient_number(db))
        db_patient = models.Patient(
            **patient.model_dump(),
            patient_id=patient_id,
            qr_code=format_qr_code(patient_id),
            created_by=created_by,
        )
        db.add(db_patient)
        db.commit()
        db.refresh(db_patient)
        logger.info(f"Registered patient {patient_id}")
        return db_patient
    except SQLAlchemyError as e:
        _fail(db, "creating patient", e)

def update_patient(db: Session, patient_id: int, patient_update: schemas.PatientUpdate) -> Optional[models.Patient]:
    db_patient = get_patient(db, patient_id)
    if not db_patient:
        return None

    update_data = patient_update.model_dump(exclude_unset=True)
    # Generated identifiers are immutable
    update_data.pop("patient_id", None)
    update_data.pop("qr_code", None)

    try:
        for key, value in update_data.items():
            setattr(db_patient, key, value)
        db_patient.updated_at = _utcnow()
        db.commit()
        db.refresh(db_patient)
        return db_patient
    except SQLAlchemyError as e:
        _fail(db, f"updating patient {patient_id}", e)


# ==================== VACCINE OPERATIONS ====================

def get_vaccines(db: Session) -> List[models.Vaccine]:
    """Active vaccines only."""
    try:
        return db.query(models.Vaccine).filter(models.Vaccine.is_active.is_(True)).order_by(models.Vaccine.name.asc()).all()
    except SQLAlchemyError as e:
        _fail(db, "fetching vaccines", e)

def get_vaccine(db: Session, vaccine_id: int) -> Optional[models.Vaccine]:
    try:
        return db.query(models.Vaccine).filter(models.Vaccine.id == vaccine_id).first()
    except SQLAlchemyError as e:
        _fail(db, f"fetching vaccine {vaccine_id}", e)

def get_vaccine_by_name(db: Session, name: str) -> Optional[models.Vaccine]:
    try:
        return db.query(models.Vaccine).filter(models.Vaccine.name == name).first()
    except SQLAlchemyError as e:
        _fail(db, f"fetching vaccine '{name}'", e)

def create_vaccine(db: Session, vaccine: schemas.VaccineCreate) -> models.Vaccine:
    try:
        db_vaccine = models.Vaccine(**vaccine.model_dump())
        db.add(db_vaccine)
        db.commit()
        db.refresh(db_vaccine)
        return db_vaccine
    except SQLAlchemyError as e:
        _fail(db, f"creating vaccine '{vaccine.name}'", e)


# ==================== VACCINATION OPERATIONS ====================

def get_vaccinations_by_patient(db: Session, patient_id: int) -> List[models.Vaccination]:
    try:
        return db.query(models.Vaccination).filter(
            models.Vaccination.patient_id == patient_id
        ).order_by(models.Vaccination.scheduled_date.desc(), models.Vaccination.id.desc()).all()
    except SQLAlchemyError as e:
        _fail(db, f"fetching vaccinations for patient {patient_id}", e)

def get_vaccinations(db: Session) -> List[models.Vaccination]:
    """Every vaccination with its patient and vaccine loaded, newest first."""
    try:
        return db.query(models.Vaccination).options(
            joinedload(models.Vaccination.patient),
            joinedload(models.Vaccination.vaccine),
        ).order_by(models.Vaccination.created_at.desc(), models.Vaccination.id.desc()).all()
    except SQLAlchemyError as e:
        _fail(db, "fetching vaccinations", e)

def get_vaccination(db: Session, vaccination_id: int) -> Optional[models.Vaccination]:
    try:
        return db.query(models.Vaccination).filter(models.Vaccination.id == vaccination_id).first()
    except SQLAlchemyError as e:
        _fail(db, f"fetching vaccination {vaccination_id}", e)

def create_vaccination(db: Session, vaccination: schemas.VaccinationCreate, administered_by: Optional[int] = None) -> models.Vaccination:
    try:
        db_vaccination = models.Vaccination(**vaccination.model_dump(), administered_by=administered_by)
        db.add(db_vaccination)
        db.commit()
        db.refresh(db_vaccination)
        return db_vaccination
    except SQLAlchemyError as e:
        _fail(db, "creating vaccination", e)

def update_vaccination(db: Session, vaccination_id: int, vaccination_update: schemas.VaccinationUpdate) -> Optional[models.Vaccination]:
    db_vaccination = get_vaccination(db, vaccination_id)
    if not db_vaccination:
        return None

    update_data = vaccination_update.model_dump(exclude_unset=True)
    # Completing a dose without a date means it was given today
    if (update_data.get("status") == models.VaccinationStatus.completed
            and not update_data.get("administered_date")
            and not db_vaccination.administered_date):
        update_data["administered_date"] = utc_today()

    try:
        for key, value in update_data.items():
            setattr(db_vaccination, key, value)
        db_vaccination.updated_at = _utcnow()
        db.commit()
        db.refresh(db_vaccination)
        return db_vaccination
    except SQLAlchemyError as e:
        _fail(db, f"updating vaccination {vaccination_id}", e)

def get_vaccination_stats(db: Session, today: Optional[date] = None) -> Dict[str, int]:
    """Completed, due (scheduled today or later) and overdue (scheduled before today) counts."""
    today = today or utc_today()
    scheduled = models.Vaccination.status == models.VaccinationStatus.scheduled

    def _count(*criteria) -> int:
        return db.query(func.count(models.Vaccination.id)).filter(and_(*criteria)).scalar() or 0

    try:
        return {
            "completed": _count(models.Vaccination.status == models.VaccinationStatus.completed),
            "due": _count(scheduled, models.Vaccination.scheduled_date >= today),
            "overdue": _count(scheduled, models.Vaccination.scheduled_date < today),
        }
    except SQLAlchemyError as e:
        _fail(db, "computing vaccination stats", e)


# ==================== APPOINTMENT OPERATIONS ====================

def _as_date(value: Union[str, date]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)

def get_appointments_by_date(db: Session, on_date: Union[str, date]) -> List[models.Appointment]:
    """Appointments whose appointment_date falls on the given day, earliest time first.

    Raises ValueError when `on_date` is not a YYYY-MM-DD string.
    """
    target = _as_date(on_date)
    try:
        return db.query(models.Appointment).filter(
            func.date(models.Appointment.appointment_date) == target
        ).order_by(models.Appointment.appointment_time.asc()).all()
    except SQLAlchemyError as e:
        _fail(db, f"fetching appointments for {target}", e)

def get_today_appointments(db: Session) -> List[models.Appointment]:
    return get_appointments_by_date(db, utc_today())

def get_appointments_by_patient(db: Session, patient_id: int) -> List[models.Appointment]:
    try:
        return db.query(models.Appointment).filter(
            models.Appointment.patient_id == patient_id
        ).order_by(models.Appointment.appointment_date.desc()).all()
    except SQLAlchemyError as e:
        _fail(db, f"fetching appointments for patient {patient_id}", e)

def get_appointment(db: Session, appointment_id: int) -> Optional[models.Appointment]:
    try:
        return db.query(models.Appointment).filter(models.Appointment.id == appointment_id).first()
    except SQLAlchemyError as e:
        _fail(db, f"fetching appointment {appointment_id}", e)

def create_appointment(db: Session, appointment: schemas.AppointmentCreate, created_by: Optional[int] = None) -> models.Appointment:
    try:
        db_appointment = models.Appointment(**appointment.model_dump(), created_by=created_by)
        db.add(db_appointment)
        db.commit()
        db.refresh(db_appointment)
        return db_appointment
    except SQLAlchemyError as e:
        _fail(db, "creating appointment", e)

def update_appointment(db: Session, appointment_id: int, appointment_update: schemas.AppointmentUpdate) -> Optional[models.Appointment]:
    db_appointment = get_appointment(db, appointment_id)
    if not db_appointment:
        return None

    try:
        for key, value in appointment_update.model_dump(exclude_unset=True).items():
            setattr(db_appointment, key, value)
        db_appointment.updated_at = _utcnow()
        db.commit()
        db.refresh(db_appointment)
        return db_appointment
    except SQLAlchemyError as e:
        _fail(db, f"updating appointment {appointment_id}", e)
