import asyncio
import re
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy import func
from sqlalchemy.orm import Session

from hirevision.database import get_db
from hirevision.dependencies import get_current_user, require_role
from hirevision.flows.jobs import score_job_match
from hirevision.models.application import Application
from hirevision.models.job import Job
from hirevision.models.organization import Organization
from hirevision.models.user import User
from hirevision.schemas.common import MessageResponse
from hirevision.schemas.job import JobCreate, JobListResponse, JobMatchResponse, JobResponse, JobUpdate
from hirevision.services.pdf_service import generate_job_posting_pdf
from hirevision.utils.timestamps import utc_now

router = APIRouter(
    prefix="/jobs",
    tags=["jobs"],
    dependencies=[Depends(get_current_user)],
)


def _job_to_response(job: Job, db: Session) -> JobResponse:
    application_count = (
        db.query(func.count(Application.id)).filter(Application.job_id == job.id).scalar()
    )
    return JobResponse(
        id=job.id,
        organization_id=job.organization_id,
        created_by=job.created_by,
        title=job.title,
        company=job.company,
        department=job.department,
        description=job.description,
        requirements=job.requirements,
        responsibilities=job.responsibilities,
        skills=job.skills or [],
        salary_range=job.salary_range,
        location=job.location,
        is_remote=bool(job.is_remote),
        employment_type=job.employment_type,
        experience_required=job.experience_required,
        status=job.status,
        created_at=job.created_at,
        updated_at=job.updated_at,
        application_count=application_count,
    )


def get_job_or_404(job_id: str, db: Session) -> Job:
    job = db.get(Job, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


def _require_owner(job: Job, user: User):
    if user.role != "Recruiter" or user.organization_id != job.organization_id:
        raise HTTPException(status_code=403, detail="Only recruiters of the owning organization can modify this job")


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(
    req: JobCreate,
    user: User = Depends(require_role("Recruiter")),
    db: Session = Depends(get_db),
):
    if not user.organization_id:
        raise HTTPException(status_code=400, detail="Create or join an organization before posting jobs")

    company = req.company
    if not company:
        org = db.get(Organization, user.organization_id)
        company = org.name if org else None

    now = utc_now()
    job = Job(
        id=str(uuid.uuid4()),
        organization_id=user.organization_id,
        created_by=user.id,
        title=req.title,
        company=company,
        department=req.department,
        description=req.description,
        requirements=req.requirements,
        responsibilities=req.responsibilities,
        skills=[s.strip() for s in req.skills if s.strip()],
        salary_range=req.salary_range,
        location=req.location,
        is_remote=req.is_remote,
        employment_type=req.employment_type,
        experience_required=req.experience_required,
        status="open",
        created_at=now,
        updated_at=now,
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return _job_to_response(job, db)


@router.get("", response_model=JobListResponse)
async def list_jobs(
    status: str | None = None,
    organization_id: str | None = None,
    q: str | None = None,
    location: str | None = None,
    remote: bool | None = None,
    employment_type: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    query = db.query(Job)

    if status:
        query = query.filter(Job.status == status)
    if organization_id:
        query = query.filter(Job.organization_id == organization_id)
    if q:
        query = query.filter(
            Job.title.ilike(f"%{q}%")
            | Job.department.ilike(f"%{q}%")
            | Job.company.ilike(f"%{q}%")
        )
    if location:
        query = query.filter(Job.location.ilike(f"%{location}%"))
    if remote is not None:
        query = query.filter(Job.is_remote == remote)
    if employment_type:
        query = query.filter(Job.employment_type == employment_type)

    total = query.count()
    jobs = query.order_by(Job.created_at.desc()).offset((page - 1) * per_page).limit(per_page).all()

    return JobListResponse(
        jobs=[_job_to_response(j, db) for j in jobs],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.post("/match", response_model=JobMatchResponse)
async def match_jobs(
    user: User = Depends(require_role("Candidate")),
    db: Session = Depends(get_db),
):
    jobs = db.query(Job).filter(Job.status == "open").all()
    results = await asyncio.gather(*[
        score_job_match(
            user.skills or [],
            user.years_of_experience,
            job.title,
            job.skills or [],
            job.experience_required,
        )
        for job in jobs
    ])
    scores = {job.id: score for job, score in zip(jobs, results) if score is not None}
    # Scored jobs first, best match first; unscored keep their posting order
    ordered = sorted(jobs, key=lambda j: (j.id not in scores, -scores.get(j.id, 0)))
    return JobMatchResponse(jobs=[_job_to_response(j, db) for j in ordered], scores=scores)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: str, db: Session = Depends(get_db)):
    return _job_to_response(get_job_or_404(job_id, db), db)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: str,
    req: JobUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    job = get_job_or_404(job_id, db)
    _require_owner(job, user)

    update_data = req.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        if value is None and key in ("title", "description", "status", "skills", "is_remote"):
            continue
        setattr(job, key, value)
    job.updated_at = utc_now()

    db.commit()
    db.refresh(job)
    return _job_to_response(job, db)


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(
    job_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    job = get_job_or_404(job_id, db)
    _require_owner(job, user)
    db.delete(job)
    db.commit()
    return MessageResponse(message="Job deleted")


@router.get("/{job_id}/pdf")
async def job_posting_pdf(job_id: str, db: Session = Depends(get_db)):
    job = get_job_or_404(job_id, db)
    pdf = generate_job_posting_pdf(
        title=job.title,
        company=job.company,
        department=job.department,
        location=job.location,
        is_remote=bool(job.is_remote),
        employment_type=job.employment_type,
        salary_range=job.salary_range,
        experience_required=job.experience_required,
        description=job.description,
        requirements=job.requirements,
        responsibilities=job.responsibilities,
        skills=job.skills or [],
        posted_at=job.created_at,
    )
    filename = re.sub(r"[^A-Za-z0-9]+", "-", job.title).strip("-").lower() or "job"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}.pdf"'},
    )
