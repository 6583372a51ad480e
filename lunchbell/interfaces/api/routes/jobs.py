"""Trigger for the periodic notification jobs, meant for an external scheduler."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lunchbell.application.use_cases.notifications import run_scheduled_jobs
from lunchbell.domain.entities import User
from lunchbell.infrastructure.database import get_db
from lunchbell.interfaces.api.dependencies import require_admin

router = APIRouter(prefix="/jobs", tags=["jobs"])
logger = logging.getLogger(__name__)


@router.post("/run", response_model=dict[str, str])
def run_jobs(db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    """Run the daily reminder and the retention cleanup."""

    results = run_scheduled_jobs(db)
    logger.info("Scheduled jobs run by user %s: %s", current_user.id, results)
    return results
