# rural_health/routers/reports.py
from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

import logging

from .. import crud, reports, schemas, security
from ..database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Reports"],
    dependencies=[Depends(security.get_current_user)],
)


class ReportFormat(str, Enum):
    csv = "csv"
    json = "json"


def _csv_response(body: str, filename: str) -> Response:
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

def _report_patients(db: Session):
    return crud.get_patients(db, limit=reports.REPORT_PATIENT_LIMIT, offset=0)


@router.get("/dashboard/stats", response_model=schemas.DashboardStatsResponse)
def read_dashboard_stats(db: Session = Depends(get_db)):
    return reports.dashboard_stats(_report_patients(db), crud.get_vaccination_stats(db))

@router.get("/reports/patients")
def patients_report(format: ReportFormat = ReportFormat.csv, db: Session = Depends(get_db)):
    patients = _report_patients(db)
    if format == ReportFormat.csv:
        return _csv_response(reports.patients_csv(patients), reports.csv_filename("patients"))
    return [schemas.PatientResponse.model_validate(p) for p in patients]

@router.get("/reports/vaccinations")
def vaccinations_report(format: ReportFormat = ReportFormat.csv, db: Session = Depends(get_db)):
    vaccinations = crud.get_vaccinations(db)
    if format == ReportFormat.csv:
        return _csv_response(reports.vaccinations_csv(vaccinations), reports.csv_filename("vaccinations"))
    return [schemas.VaccinationDetail.model_validate(v) for v in vaccinations]

@router.get("/reports/overdue")
def overdue_report(format: ReportFormat = ReportFormat.csv, db: Session = Depends(get_db)):
    # One vaccination query per patient; fine at clinic scale
    report = reports.overdue_report(
        _report_patients(db),
        lambda patient: crud.get_vaccinations_by_patient(db, patient.id),
    )
    if format == ReportFormat.csv:
        return _csv_response(reports.overdue_csv(report), reports.csv_filename("overdue"))
    return [
        schemas.OverduePatient(
            **schemas.PatientResponse.model_validate(entry["patient"]).model_dump(),
            overdue_vaccinations=[
                schemas.OverdueVaccination(
                    **schemas.VaccinationResponse.model_validate(item["vaccination"]).model_dump(),
                    days_overdue=item["days_overdue"],
                )
                for item in entry["overdue_vaccinations"]
            ],
        )
        for entry in report
    ]

@router.get("/reports/demographics")
def demographics_report(format: ReportFormat = ReportFormat.csv, db: Session = Depends(get_db)):
    summary = reports.demographics(_report_patients(db))
    if format == ReportFormat.csv:
        return _csv_response(reports.demographics_csv(summary), reports.csv_filename("demographics"))
    return schemas.DemographicsReport(**summary)

@router.get("/reports/monthly")
def monthly_report(
    format: ReportFormat = ReportFormat.csv,
    year: Optional[int] = Query(None, ge=1900, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
):
    try:
        summary = reports.monthly_summary(_report_patients(db), crud.get_vaccinations(db), year=year, month=month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if format == ReportFormat.csv:
        return _csv_response(reports.monthly_csv(summary), reports.csv_filename("monthly", summary["period"]))
    return schemas.MonthlyReport(**summary)
