from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from hirevision.database import get_db
from hirevision.dependencies import require_role
from hirevision.models.application import Application
from hirevision.models.interview import Interview
from hirevision.models.job import Job
from hirevision.models.user import User

router = APIRouter(
    prefix="/analytics",
    tags=["analytics"],
)


@router.get("")
async def get_analytics(
    user: User = Depends(require_role("Recruiter", "Interviewer")),
    db: Session = Depends(get_db),
):
    """Hiring pipeline numbers for the caller's organization."""
    org_id = user.organization_id

    total_candidates = (
        db.query(func.count(User.id)).filter(User.role == "Candidate").scalar()
    )
    active_jobs = (
        db.query(func.count(Job.id))
        .filter(Job.organization_id == org_id, Job.status == "open")
        .scalar()
    )

    org_applications = (
        db.query(Application)
        .join(Job, Application.job_id == Job.id)
        .filter(Job.organization_id == org_id)
    )
    status_rows = (
        org_applications.with_entities(Application.status, func.count(Application.id).label("n"))
        .group_by(Application.status)
        .all()
    )
    applications_by_status: dict[str, int] = {row.status: row.n for row in status_rows}

    ranked = org_applications.filter(Application.fit_score.isnot(None))
    ranked_count = ranked.count()
    avg_fit = ranked.with_entities(func.avg(Application.fit_score)).scalar()

    interview_rows = (
        db.query(Interview.status, func.count(Interview.id).label("n"))
        .filter(Interview.organization_id == org_id)
        .group_by(Interview.status)
        .all()
    )
    interviews_by_status: dict[str, int] = {row.status: row.n for row in interview_rows}

    return {
        "total_candidates": total_candidates,
        "active_jobs": active_jobs,
        "total_applications": sum(applications_by_status.values()),
        "applications_by_status": applications_by_status,
        "interviews_by_status": interviews_by_status,
        "ai_ranked_applications": ranked_count,
        "average_fit_score": round(avg_fit, 1) if avg_fit is not None else None,
    }
