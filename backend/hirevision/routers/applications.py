import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hirevision.database import get_db
from hirevision.dependencies import get_current_user, require_role
from hirevision.flows.resume import rank_candidate
from hirevision.models.application import Application
from hirevision.models.job import Job
from hirevision.models.user import User
from hirevision.routers.jobs import get_job_or_404
from hirevision.schemas.application import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationStatusUpdate,
)
from hirevision.schemas.common import Envelope
from hirevision.utils.timestamps import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/applications",
    tags=["applications"],
    dependencies=[Depends(get_current_user)],
)

job_applications_router = APIRouter(
    prefix="/jobs/{job_id}/applications",
    tags=["applications"],
    dependencies=[Depends(get_current_user)],
)


def application_to_response(app: Application) -> ApplicationResponse:
    return ApplicationResponse(
        id=app.id,
        job_id=app.job_id,
        job_title=app.job.title,
        candidate_id=app.candidate_id,
        candidate_name=app.candidate.display_name,
        status=app.status,
        cover_letter=app.cover_letter,
        resume_key=app.resume_key,
        fit_score=app.fit_score,
        fit_reasoning=app.fit_reasoning,
        created_at=app.created_at,
        updated_at=app.updated_at,
    )


def get_application_or_404(application_id: str, db: Session) -> Application:
    app = db.get(Application, application_id)
    if not app:
        raise HTTPException(status_code=404, detail="Application not found")
    return app


def require_hiring_team(job: Job, user: User):
    if user.role not in ("Recruiter", "Interviewer") or user.organization_id != job.organization_id:
        raise HTTPException(status_code=403, detail="Only the hiring organization can manage these applications")


def job_text_for_ranking(job: Job) -> str:
    parts = [job.title, job.description]
    if job.responsibilities:
        parts.append(f"Responsibilities:\n{job.responsibilities}")
    if job.requirements:
        parts.append(f"Requirements:\n{job.requirements}")
    if job.skills:
        parts.append(f"Skills: {', '.join(job.skills)}")
    if job.experience_required:
        parts.append(f"Experience: {job.experience_required}")
    return "\n\n".join(parts)


@job_applications_router.post("", response_model=ApplicationResponse, status_code=201)
async def apply_to_job(
    job_id: str,
    req: ApplicationCreate,
    user: User = Depends(require_role("Candidate")),
    db: Session = Depends(get_db),
):
    job = get_job_or_404(job_id, db)
    if job.status != "open":
        raise HTTPException(status_code=400, detail="This job is not accepting applications")

    existing = db.query(Application).filter_by(job_id=job_id, candidate_id=user.id).first()
    if existing:
        raise HTTPException(status_code=409, detail="You have already applied to this job")

    now = utc_now()
    app = Application(
        id=str(uuid.uuid4()),
        job_id=job_id,
        candidate_id=user.id,
        status="applied",
        cover_letter=req.cover_letter,
        resume_key=req.resume_key or user.resume_key,
        created_at=now,
        updated_at=now,
    )
    db.add(app)
    try:
        db.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent apply for the same pair
        db.rollback()
        raise HTTPException(status_code=409, detail="You have already applied to this job") from exc
    db.refresh(app)
    return application_to_response(app)


@job_applications_router.get("", response_model=ApplicationListResponse)
async def list_job_applications(
    job_id: str,
    status: str | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    job = get_job_or_404(job_id, db)
    require_hiring_team(job, user)

    query = db.query(Application).filter(Application.job_id == job_id)
    if status:
        query = query.filter(Application.status == status)
    apps = query.order_by(Application.created_at.desc()).all()
    return ApplicationListResponse(applications=[application_to_response(a) for a in apps], total=len(apps))


@router.get("/mine", response_model=ApplicationListResponse)
async def my_applications(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    apps = (
        db.query(Application)
        .filter(Application.candidate_id == user.id)
        .order_by(Application.created_at.desc())
        .all()
    )
    return ApplicationListResponse(applications=[application_to_response(a) for a in apps], total=len(apps))


@router.put("/{application_id}/status", response_model=ApplicationResponse)
async def update_application_status(
    application_id: str,
    req: ApplicationStatusUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    app = get_application_or_404(application_id, db)
    require_hiring_team(app.job, user)
    app.status = req.status
    app.updated_at = utc_now()
    db.commit()
    db.refresh(app)
    return application_to_response(app)


@router.post("/{application_id}/rank", response_model=Envelope, response_model_exclude_none=True)
async def rank_application(
    application_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    app = get_application_or_404(application_id, db)
    require_hiring_team(app.job, user)
    if not app.candidate.resume_text:
        raise HTTPException(status_code=400, detail="Candidate has no resume text to rank")

    result = await rank_candidate(job_text_for_ranking(app.job), app.candidate.resume_text)
    if not result.fallback:
        app.fit_score = result.output["fit_score"]
        app.fit_reasoning = result.output["reasoning"]
        app.updated_at = utc_now()
        db.commit()
        db.refresh(app)
    else:
        logger.warning("Ranking for application %s not stored: model fallback", app.id)

    return Envelope(
        data={**result.output, "application": application_to_response(app).model_dump()},
        fallback=result.fallback,
        warning=result.warning,
    )
