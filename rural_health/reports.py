"""Dashboard statistics and downloadable reports.

Everything here works on rows that were already fetched through ``crud``;
nothing in this module touches the database. Date-sensitive functions take an
optional ``today`` so callers (and tests) can pin the reporting day.
"""
import csv
import io
from collections import Counter
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from . import models
from .crud import utc_today

NOT_AVAILABLE = "N/A"
UNKNOWN = "Unknown"

# Patient lists feeding the reports are capped at this many rows
REPORT_PATIENT_LIMIT = 1000

REPORT_FILENAMES = {
    "patients": "patients_report.csv",
    "vaccinations": "vaccinations_report.csv",
    "overdue": "overdue_vaccinations_report.csv",
    "demographics": "demographics_report.csv",
}

PATIENTS_HEADER = ["Patient ID", "Name", "Date of Birth", "Gender", "Phone", "Address", "Age Group", "Date Registered"]
VACCINATIONS_HEADER = ["Patient ID", "Patient Name", "Vaccine", "Dose Number", "Scheduled Date", "Administered Date", "Status", "Notes"]
OVERDUE_HEADER = ["Patient ID", "Patient Name", "Phone", "Scheduled Date", "Days Overdue", "Status"]
DEMOGRAPHICS_HEADER = ["Demographic Type", "Category", "Count"]


def _label(value: Any) -> Any:
    """Enum members render as their value, everything else unchanged."""
    return getattr(value, "value", value)

def _text(value: Any) -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(_label(value))

def _as_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value

def _in_month(value: Any, year: int, month: int) -> bool:
    day = _as_date(value)
    return day is not None and day.year == year and day.month == month


# ==================== AGGREGATES ====================

def dashboard_stats(patients: Sequence[models.Patient], vaccination_stats: Dict[str, int]) -> Dict[str, int]:
    return {"total_patients": len(patients), **vaccination_stats}

def demographics(patients: Sequence[models.Patient]) -> Dict[str, Any]:
    """Patient counts per age group and per gender; absent values count as "Unknown"."""
    by_age_group = Counter(str(_label(p.age_group) or UNKNOWN) for p in patients)
    by_gender = Counter(p.gender or UNKNOWN for p in patients)
    return {
        "by_age_group": dict(by_age_group),
        "by_gender": dict(by_gender),
        "total": len(patients),
    }

def completion_rate(vaccinations_given: int, total_patients: int) -> str:
    if total_patients <= 0:
        return "0"
    return f"{vaccinations_given / total_patients * 100:.1f}"

def monthly_summary(
    patients: Sequence[models.Patient],
    vaccinations: Sequence[models.Vaccination],
    year: Optional[int] = None,
    month: Optional[int] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Registrations and administered doses for one calendar month.

    Patients are bucketed by ``created_at``, vaccinations by
    ``administered_date``; rows without the date are skipped.
    """
    today = today or utc_today()
    year = year or today.year
    month = month or today.month
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")

    new_patients = sum(1 for p in patients if _in_month(p.created_at, year, month))
    vaccinations_given = sum(1 for v in vaccinations if _in_month(v.administered_date, year, month))
    total_patients = len(patients)

    return {
        "period": f"{year}-{month:02d}",
        "new_patients": new_patients,
        "vaccinations_given": vaccinations_given,
        "total_patients": total_patients,
        "completion_rate": completion_rate(vaccinations_given, total_patients),
    }

def is_overdue(vaccination: models.Vaccination, today: date) -> bool:
    return (
        vaccination.scheduled_date is not None
        and vaccination.scheduled_date < today
        and vaccination.status == models.VaccinationStatus.scheduled
    )

def days_overdue(vaccination: models.Vaccination, today: date) -> int:
    return (today - _as_date(vaccination.scheduled_date)).days

def overdue_report(
    patients: Iterable[models.Patient],
    vaccinations_for: Callable[[models.Patient], Sequence[models.Vaccination]],
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """Patients with at least one scheduled dose whose date has passed.

    ``vaccinations_for`` loads one patient's vaccinations; patients with
    nothing overdue are omitted.
    """
    today = today or utc_today()
    report = []
    for patient in patients:
        overdue = [
            {"vaccination": v, "days_overdue": days_overdue(v, today)}
            for v in vaccinations_for(patient)
            if is_overdue(v, today)
        ]
        if overdue:
            report.append({"patient": patient, "overdue_vaccinations": overdue})
    return report


# ==================== CSV RENDERING ====================

def _render(header: List[str], rows: Iterable[List[Any]], quoting: int = csv.QUOTE_NONNUMERIC) -> str:
    buffer = io.StringIO()
    buffer.write(",".join(header) + "\n")
    writer = csv.writer(buffer, quoting=quoting, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()

def patients_csv(patients: Iterable[models.Patient]) -> str:
    return _render(PATIENTS_HEADER, (
        [
            str(p.patient_id),
            p.name,
            _text(p.date_of_birth),
            _text(p.gender),
            _text(p.phone),
            _text(p.address),
            _text(p.age_group),
            _text(p.created_at),
        ]
        for p in patients
    ))

def vaccinations_csv(vaccinations: Iterable[models.Vaccination]) -> str:
    rows = []
    for v in vaccinations:
        patient, vaccine = v.patient, v.vaccine
        rows.append([
            _text(patient.patient_id if patient else None),
            _text(patient.name if patient else None),
            _text(vaccine.name if vaccine else None),
            v.dose_number,
            _text(v.scheduled_date),
            _text(v.administered_date),
            _text(v.status),
            _text(v.notes),
        ])
    return _render(VACCINATIONS_HEADER, rows)

def overdue_csv(report: Iterable[Dict[str, Any]]) -> str:
    rows = []
    for entry in report:
        patient = entry["patient"]
        for item in entry["overdue_vaccinations"]:
            vaccination = item["vaccination"]
            rows.append([
                str(patient.patient_id),
                patient.name,
                _text(patient.phone),
                _text(vaccination.scheduled_date),
                item["days_overdue"],
                _text(vaccination.status),
            ])
    return _render(OVERDUE_HEADER, rows)

def demographics_csv(summary: Dict[str, Any]) -> str:
    rows = [["Age Group", group, count] for group, count in summary["by_age_group"].items()]
    rows += [["Gender", gender, count] for gender, count in summary["by_gender"].items()]
    rows.append(["Total", "All Patients", summary["total"]])
    return _render(DEMOGRAPHICS_HEADER, rows)

def monthly_csv(summary: Dict[str, Any]) -> str:
    body = _render(["Metric", "Value"], [
        ["New Patients Registered", summary["new_patients"]],
        ["Vaccinations Given", summary["vaccinations_given"]],
        ["Total Patients", summary["total_patients"]],
        ["Completion Rate", f"{summary['completion_rate']}%"],
    ], quoting=csv.QUOTE_MINIMAL)
    return f"Monthly Report for {summary['period']}\n\n" + body

def csv_filename(report: str, period: Optional[str] = None) -> str:
    if report == "monthly":
        return f"monthly_report_{period}.csv"
    return REPORT_FILENAMES[report]
