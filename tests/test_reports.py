# tests/test_reports.py
from datetime import date, datetime, timedelta
from types import SimpleNamespace

import pytest

from rural_health import models, reports


TODAY = date(2026, 10, 16)


def patient(patient_id="RH000001", name="Amina Otieno", age_group=models.AgeGroup.infant, gender="female",
            phone=None, created_at=None, **fields):
    defaults = dict(date_of_birth=None, address=None)
    defaults.update(fields)
    return SimpleNamespace(
        patient_id=patient_id, name=name, age_group=age_group, gender=gender, phone=phone,
        created_at=created_at, **defaults,
    )


def vaccination(scheduled_date=None, status=models.VaccinationStatus.scheduled, administered_date=None,
                dose_number=1, notes=None, patient=None, vaccine=None):
    return SimpleNamespace(
        scheduled_date=scheduled_date, status=status, administered_date=administered_date,
        dose_number=dose_number, notes=notes, patient=patient, vaccine=vaccine,
    )


# ---------- demographics ----------

def test_demographics_counts_sum_to_total():
    patients = [
        patient(age_group=models.AgeGroup.infant, gender="female"),
        patient(age_group=models.AgeGroup.infant, gender="male"),
        patient(age_group=models.AgeGroup.elderly, gender=None),
    ]

    summary = reports.demographics(patients)

    assert summary["total"] == 3
    assert summary["by_age_group"] == {"infant": 2, "elderly": 1}
    assert summary["by_gender"] == {"female": 1, "male": 1, "Unknown": 1}
    assert sum(summary["by_age_group"].values()) == summary["total"]
    assert sum(summary["by_gender"].values()) == summary["total"]


def test_demographics_of_nobody():
    assert reports.demographics([]) == {"by_age_group": {}, "by_gender": {}, "total": 0}


# ---------- monthly ----------

def test_completion_rate_formatting():
    assert reports.completion_rate(0, 0) == "0"
    assert reports.completion_rate(1, 3) == "33.3"
    assert reports.completion_rate(2, 2) == "100.0"


def test_monthly_summary_buckets_by_month_and_skips_missing_dates():
    patients = [
        patient(created_at=datetime(2026, 10, 2, 9, 0)),
        patient(created_at=datetime(2026, 9, 30, 23, 0)),
        patient(created_at=None),
    ]
    vaccinations = [
        vaccination(administered_date=date(2026, 10, 5), status=models.VaccinationStatus.completed),
        vaccination(administered_date=date(2025, 10, 5), status=models.VaccinationStatus.completed),
        vaccination(administered_date=None),
    ]

    summary = reports.monthly_summary(patients, vaccinations, year=2026, month=10)

    assert summary == {
        "period": "2026-10",
        "new_patients": 1,
        "vaccinations_given": 1,
        "total_patients": 3,
        "completion_rate": "33.3",
    }


def test_monthly_summary_defaults_to_current_month():
    summary = reports.monthly_summary([], [], today=TODAY)

    assert summary["period"] == "2026-10"
    assert summary["completion_rate"] == "0"


def test_monthly_summary_rejects_bad_month():
    with pytest.raises(ValueError):
        reports.monthly_summary([], [], year=2026, month=13)


# ---------- overdue ----------

def test_overdue_report_only_lists_past_scheduled_doses():
    alice = patient(patient_id="RH000001", name="Alice")
    bob = patient(patient_id="RH000002", name="Bob")
    history = {
        "RH000001": [
            vaccination(TODAY - timedelta(days=1)),
            vaccination(TODAY),
            vaccination(TODAY - timedelta(days=10), status=models.VaccinationStatus.completed),
        ],
        "RH000002": [vaccination(TODAY + timedelta(days=3))],
    }

    report = reports.overdue_report([alice, bob], lambda p: history[p.patient_id], today=TODAY)

    assert len(report) == 1
    assert report[0]["patient"] is alice
    overdue = report[0]["overdue_vaccinations"]
    assert len(overdue) == 1
    assert overdue[0]["days_overdue"] == 1


def test_missing_scheduled_date_is_never_overdue():
    assert not reports.is_overdue(vaccination(None), TODAY)


# ---------- csv ----------

def test_patients_csv_fills_missing_values():
    body = reports.patients_csv([
        patient(phone="0712345678", date_of_birth=date(2024, 3, 1), created_at=datetime(2026, 10, 1, 8, 0)),
        patient(patient_id="RH000002", name="No Details", gender=None),
    ])
    lines = body.splitlines()

    assert lines[0] == "Patient ID,Name,Date of Birth,Gender,Phone,Address,Age Group,Date Registered"
    assert lines[1] == '"RH000001","Amina Otieno","2024-03-01","female","0712345678","N/A","infant","2026-10-01T08:00:00"'
    assert lines[2] == '"RH000002","No Details","N/A","N/A","N/A","N/A","infant","N/A"'


def test_patients_csv_with_no_rows_is_header_only():
    assert reports.patients_csv([]) == ",".join(reports.PATIENTS_HEADER) + "\n"


def test_vaccinations_csv_uses_joined_names():
    row = vaccination(
        scheduled_date=date(2026, 10, 1), status=models.VaccinationStatus.completed,
        administered_date=date(2026, 10, 2), dose_number=2,
        patient=SimpleNamespace(patient_id="RH000007", name="Otieno"),
        vaccine=SimpleNamespace(name="OPV"),
    )

    lines = reports.vaccinations_csv([row]).splitlines()

    assert lines[1] == '"RH000007","Otieno","OPV",2,"2026-10-01","2026-10-02","completed","N/A"'


def test_overdue_csv_one_line_per_dose():
    alice = patient(name="Alice", phone=None)
    report = [{
        "patient": alice,
        "overdue_vaccinations": [
            {"vaccination": vaccination(date(2026, 10, 10)), "days_overdue": 6},
            {"vaccination": vaccination(date(2026, 10, 15)), "days_overdue": 1},
        ],
    }]

    lines = reports.overdue_csv(report).splitlines()

    assert lines[0] == "Patient ID,Patient Name,Phone,Scheduled Date,Days Overdue,Status"
    assert lines[1:] == [
        '"RH000001","Alice","N/A","2026-10-10",6,"scheduled"',
        '"RH000001","Alice","N/A","2026-10-15",1,"scheduled"',
    ]


def test_demographics_csv_ends_with_total():
    summary = {"by_age_group": {"infant": 2}, "by_gender": {"female": 2}, "total": 2}

    lines = reports.demographics_csv(summary).splitlines()

    assert lines == [
        "Demographic Type,Category,Count",
        '"Age Group","infant",2',
        '"Gender","female",2',
        '"Total","All Patients",2',
    ]


def test_monthly_csv_layout():
    summary = {
        "period": "2026-10", "new_patients": 4, "vaccinations_given": 3,
        "total_patients": 9, "completion_rate": "33.3",
    }

    assert reports.monthly_csv(summary) == (
        "Monthly Report for 2026-10\n"
        "\n"
        "Metric,Value\n"
        "New Patients Registered,4\n"
        "Vaccinations Given,3\n"
        "Total Patients,9\n"
        "Completion Rate,33.3%\n"
    )


def test_csv_filenames():
    assert reports.csv_filename("patients") == "patients_report.csv"
    assert reports.csv_filename("overdue") == "overdue_vaccinations_report.csv"
    assert reports.csv_filename("monthly", "2026-10") == "monthly_report_2026-10.csv"
