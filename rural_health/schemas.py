# rural_health/schemas.py
from datetime import datetime, date
from typing import List, Optional, Dict
from pydantic import BaseModel, ConfigDict, Field, EmailStr, field_validator
from .models import UserRole, AgeGroup, VaccinationStatus, AppointmentStatus, AppointmentType

# --- Base Schemas ---
class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


def _not_null(v):
    """Field masks may omit a required column but never send it as null."""
    if v is None:
        raise ValueError("may be omitted but cannot be null")
    return v


# --- User Schemas ---
class UserBase(BaseSchema):
    username: str = Field(..., min_length=3, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None

class UserCreate(UserBase):
    password: str = Field(..., min_length=1)
    role: UserRole = UserRole.health_worker
    is_active: bool = True

class UserUpdate(BaseSchema):
    """Field mask for a user; only fields that were sent are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    password: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None

    @field_validator("name", "role", "password", "is_active", mode="before")
    @classmethod
    def reject_null(cls, v):
        return _not_null(v)

class UserResponse(UserBase):
    id: int
    role: UserRole
    is_active: Optional[bool] = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# --- Auth Schemas ---
class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

class SignupRequest(UserBase):
    password: str = Field(..., min_length=1)
    is_first_user: bool = False

class AuthResponse(BaseModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
    expires_in: int

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int

class SetupStatus(BaseModel):
    needs_setup: bool

class MessageResponse(BaseModel):
    message: str


# --- Patient Schemas ---
class PatientBase(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(None, max_length=10)
    address: Optional[str] = None
    guardian_name: Optional[str] = Field(None, max_length=255)
    guardian_phone: Optional[str] = Field(None, max_length=20)
    age_group: AgeGroup
    medical_history: Optional[str] = None
    allergies: Optional[str] = None

class PatientCreate(PatientBase):
    pass

class PatientUpdate(BaseSchema):
    """Field mask for a patient. patient_id and qr_code are deliberately absent."""
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(None, max_length=10)
    address: Optional[str] = None
    guardian_name: Optional[str] = Field(None, max_length=255)
    guardian_phone: Optional[str] = Field(None, max_length=20)
    age_group: Optional[AgeGroup] = None
    medical_history: Optional[str] = None
    allergies: Optional[str] = None

    @field_validator("name", "age_group", mode="before")
    @classmethod
    def reject_null(cls, v):
        return _not_null(v)

class PatientResponse(PatientBase):
    id: int
    patient_id: str
    qr_code: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class PatientSummary(BaseSchema):
    id: int
    name: str
    patient_id: str
    phone: Optional[str] = None


# --- Vaccine Schemas ---
class VaccineBase(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    age_group: str = Field(..., min_length=1, max_length=20)
    doses_required: int = Field(1, ge=1)
    interval_days: Optional[int] = Field(None, ge=0)
    is_active: bool = True

class VaccineCreate(VaccineBase):
    pass

class VaccineResponse(VaccineBase):
    id: int
    is_active: Optional[bool] = True

class VaccineSummary(BaseSchema):
    id: int
    name: str
    description: Optional[str] = None


# --- Vaccination Schemas ---
class VaccinationBase(BaseSchema):
    patient_id: int
    vaccine_id: int
    dose_number: int = Field(..., ge=1)
    scheduled_date: Optional[date] = None
    administered_date: Optional[date] = None
    status: VaccinationStatus = VaccinationStatus.scheduled
    notes: Optional[str] = None

class VaccinationCreate(VaccinationBase):
    pass

class VaccinationUpdate(BaseSchema):
    """Field mask for a vaccination record."""
    dose_number: Optional[int] = Field(None, ge=1)
    scheduled_date: Optional[date] = None
    administered_date: Optional[date] = None
    status: Optional[VaccinationStatus] = None
    notes: Optional[str] = None

    @field_validator("dose_number", "status", mode="before")
    @classmethod
    def reject_null(cls, v):
        return _not_null(v)

class VaccinationResponse(VaccinationBase):
    id: int
    administered_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class VaccinationDetail(VaccinationResponse):
    """Vaccination with its patient and vaccine joined in."""
    patient: Optional[PatientSummary] = None
    vaccine: Optional[VaccineSummary] = None

class VaccinationStats(BaseModel):
    completed: int
    due: int
    overdue: int


# --- Appointment Schemas ---
class AppointmentBase(BaseSchema):
    patient_id: int
    vaccination_id: Optional[int] = None
    appointment_date: datetime
    appointment_time: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    status: AppointmentStatus = AppointmentStatus.scheduled
    type: AppointmentType
    notes: Optional[str] = None

class AppointmentCreate(AppointmentBase):
    pass

class AppointmentUpdate(BaseSchema):
    vaccination_id: Optional[int] = None
    appointment_date: Optional[datetime] = None
    appointment_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    status: Optional[AppointmentStatus] = None
    type: Optional[AppointmentType] = None
    notes: Optional[str] = None

    @field_validator("appointment_date", "appointment_time", "status", "type", mode="before")
    @classmethod
    def reject_null(cls, v):
        return _not_null(v)

class AppointmentResponse(AppointmentBase):
    id: int
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# --- Dashboard & Report Schemas ---
class DashboardStatsResponse(BaseModel):
    total_patients: int
    completed: int
    due: int
    overdue: int

class DemographicsReport(BaseModel):
    by_age_group: Dict[str, int]
    by_gender: Dict[str, int]
    total: int

class MonthlyReport(BaseModel):
    period: str
    new_patients: int
    vaccinations_given: int
    total_patients: int
    completion_rate: str

    @field_validator("period")
    @classmethod
    def validate_period(cls, v):
        year, _, month = v.partition("-")
        if not (year.isdigit() and month.isdigit() and 1 <= int(month) <= 12):
            raise ValueError("period must be YYYY-MM")
        return v

class OverdueVaccination(VaccinationResponse):
    days_overdue: int

class OverduePatient(PatientResponse):
    overdue_vaccinations: List[OverdueVaccination]


class HealthResponse(BaseModel):
    status: str
    database: str
