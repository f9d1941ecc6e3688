# Seeds reference data on startup.
import logging
from .database import SessionLocal
from .schemas import VaccineCreate
from . import crud

logger = logging.getLogger(__name__)

# National immunisation schedule used at the clinics
DEFAULT_VACCINES = [
    VaccineCreate(name="BCG", description="Bacillus Calmette-Guerin (tuberculosis)", age_group="infant", doses_required=1),
    VaccineCreate(name="OPV", description="Oral polio vaccine", age_group="infant", doses_required=4, interval_days=28),
    VaccineCreate(name="Hepatitis B", description="Hepatitis B birth dose and series", age_group="infant", doses_required=3, interval_days=28),
    VaccineCreate(name="Pentavalent", description="DPT, Hepatitis B and Hib combined", age_group="infant", doses_required=3, interval_days=28),
    VaccineCreate(name="Rotavirus", description="Rotavirus oral vaccine", age_group="infant", doses_required=3, interval_days=28),
    VaccineCreate(name="Measles-Rubella", description="MR vaccine", age_group="child", doses_required=2, interval_days=180),
    VaccineCreate(name="DPT Booster", description="Diphtheria, pertussis, tetanus booster", age_group="child", doses_required=2, interval_days=1095),
    VaccineCreate(name="Td", description="Tetanus and adult diphtheria for pregnant women", age_group="pregnant", doses_required=2, interval_days=28),
    VaccineCreate(name="Influenza", description="Seasonal influenza", age_group="elderly", doses_required=1),
    VaccineCreate(name="Pneumococcal", description="Pneumococcal polysaccharide vaccine", age_group="elderly", doses_required=1),
]


def seed_vaccines(db) -> int:
    """Insert any default vaccine that is not in the catalogue yet. Returns how many were added."""
    created = 0
    for vaccine in DEFAULT_VACCINES:
        if not crud.get_vaccine_by_name(db, vaccine.name):
            crud.create_vaccine(db, vaccine)
            created += 1
    return created


def create_initial_data():
    """Creates initial data like the vaccine catalogue if it doesn't exist."""
    db = SessionLocal()
    try:
        created = seed_vaccines(db)
        if created:
            logger.info(f"Seeded {created} default vaccines.")
    except crud.CRUDError as e:
        logger.error(f"CRITICAL: Error during initial data creation: {e}")
    finally:
        db.close()
