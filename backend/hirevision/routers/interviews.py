import uuid

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.orm import Session

from hirevision.database import get_db
from hirevision.dependencies import get_current_user
from hirevision.flows.jobs import suggest_interview_questions
from hirevision.models.application import Application
from hirevision.models.interview import Interview
from hirevision.models.user import User
from hirevision.routers.applications import (
    get_application_or_404,
    job_text_for_ranking,
    require_hiring_team,
)
from hirevision.schemas.common import Envelope
from hirevision.schemas.interview import (
    FeedbackCreate,
    InterviewCreate,
    InterviewListResponse,
    InterviewResponse,
    InterviewUpdate,
)
from hirevision.services.calendar_service import generate_interview_ics
from hirevision.utils.timestamps import to_timestamp, utc_now

router = APIRouter(
    prefix="/interviews",
    tags=["interviews"],
    dependencies=[Depends(get_current_user)],
)

application_interviews_router = APIRouter(
    prefix="/applications/{application_id}/interviews",
    tags=["interviews"],
    dependencies=[Depends(get_current_user)],
)


def _interview_to_response(interview: Interview) -> InterviewResponse:
    app = interview.application
    return InterviewResponse(
        id=interview.id,
        application_id=interview.application_id,
        job_id=app.job_id,
        job_title=app.job.title,
        candidate_id=app.candidate_id,
        candidate_name=app.candidate.display_name,
        scheduled_at=interview.scheduled_at,
        type=interview.type,
        status=interview.status,
        duration_minutes=interview.duration_minutes,
        location=interview.location,
        notes=interview.notes,
        interviewer_ids=interview.interviewer_ids or [],
        feedback=interview.feedback or [],
        created_at=interview.created_at,
        updated_at=interview.updated_at,
    )


def _get_visible_interview(interview_id: str, user: User, db: Session) -> Interview:
    interview = db.get(Interview, interview_id)
    if not interview:
        raise HTTPException(status_code=404, detail="Interview not found")
    app = interview.application
    is_candidate = app.candidate_id == user.id
    in_org = user.organization_id == app.job.organization_id
    is_hiring_team = (user.role == "Recruiter" and in_org) or (
        user.role == "Interviewer" and in_org and user.id in (interview.interviewer_ids or [])
    )
    if not (is_candidate or is_hiring_team):
        raise HTTPException(status_code=403, detail="You do not have access to this interview")
    return interview


def _validate_interviewers(interviewer_ids: list[str], organization_id: str, db: Session) -> list[str]:
    """Assigned interviewers must be hiring-team members of the organization."""
    ids = list(dict.fromkeys(interviewer_ids))
    for user_id in ids:
        member = db.get(User, user_id)
        if (
            member is None
            or member.role not in ("Recruiter", "Interviewer")
            or member.organization_id != organization_id
        ):
            raise HTTPException(status_code=400, detail=f"User {user_id} cannot interview for this organization")
    return ids


@application_interviews_router.post("", response_model=InterviewResponse, status_code=201)
async def schedule_interview(
    application_id: str,
    req: InterviewCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    app = get_application_or_404(application_id, db)
    require_hiring_team(app.job, user)

    now = utc_now()
    interview = Interview(
        id=str(uuid.uuid4()),
        application_id=app.id,
        organization_id=app.job.organization_id,
        scheduled_at=to_timestamp(req.scheduled_at),
        type=req.type,
        status="scheduled",
        duration_minutes=req.duration_minutes,
        location=req.location,
        notes=req.notes,
        interviewer_ids=_validate_interviewers(req.interviewer_ids, app.job.organization_id, db),
        feedback=[],
        created_at=now,
        updated_at=now,
    )
    db.add(interview)
    db.commit()
    db.refresh(interview)
    return _interview_to_response(interview)


@router.get("", response_model=InterviewListResponse)
async def list_interviews(
    status: str | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    query = db.query(Interview).join(Application, Interview.application_id == Application.id)
    if user.role == "Candidate":
        query = query.filter(Application.candidate_id == user.id)
    else:
        query = query.filter(Interview.organization_id == user.organization_id)
    if status:
        query = query.filter(Interview.status == status)

    interviews = query.order_by(Interview.scheduled_at).all()
    if user.role == "Interviewer":
        interviews = [i for i in interviews if user.id in (i.interviewer_ids or [])]
    return InterviewListResponse(
        interviews=[_interview_to_response(i) for i in interviews],
        total=len(interviews),
    )


@router.get("/{interview_id}", response_model=InterviewResponse)
async def get_interview(
    interview_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _interview_to_response(_get_visible_interview(interview_id, user, db))


@router.put("/{interview_id}", response_model=InterviewResponse)
async def update_interview(
    interview_id: str,
    req: InterviewUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    interview = _get_visible_interview(interview_id, user, db)
    require_hiring_team(interview.application.job, user)

    for key, value in req.model_dump(exclude_unset=True).items():
        if value is None and key in ("scheduled_at", "type", "status", "duration_minutes", "interviewer_ids"):
            continue
        if key == "scheduled_at":
            value = to_timestamp(value)
        elif key == "interviewer_ids":
            value = _validate_interviewers(value, interview.organization_id, db)
        setattr(interview, key, value)
    interview.updated_at = utc_now()
    db.commit()
    db.refresh(interview)
    return _interview_to_response(interview)


@router.post("/{interview_id}/feedback", response_model=InterviewResponse, status_code=201)
async def add_feedback(
    interview_id: str,
    req: FeedbackCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    interview = _get_visible_interview(interview_id, user, db)
    require_hiring_team(interview.application.job, user)
    if any(f["interviewer_id"] == user.id for f in interview.feedback or []):
        raise HTTPException(status_code=409, detail="You have already submitted feedback for this interview")

    now = utc_now()
    entry = {
        "interviewer_id": user.id,
        "interviewer_name": user.display_name,
        "rating": req.rating,
        "recommendation": req.recommendation,
        "comments": req.comments,
        "created_at": now,
    }
    # JSON columns are not mutation-tracked; assign a new list
    interview.feedback = [*(interview.feedback or []), entry]
    interview.updated_at = now
    db.commit()
    db.refresh(interview)
    return _interview_to_response(interview)


@router.get("/{interview_id}/calendar")
async def interview_calendar(
    interview_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    interview = _get_visible_interview(interview_id, user, db)
    app = interview.application
    ics = generate_interview_ics(
        interview_id=interview.id,
        job_title=app.job.title,
        company=app.job.company,
        candidate_name=app.candidate.display_name,
        interview_type=interview.type,
        scheduled_at=interview.scheduled_at,
        duration_minutes=interview.duration_minutes,
        location=interview.location,
        notes=interview.notes,
    )
    return Response(
        content=ics,
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="interview-{interview.id[:8]}.ics"'},
    )


@router.get("/{interview_id}/questions", response_model=Envelope, response_model_exclude_none=True)
async def interview_questions(
    interview_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    interview = _get_visible_interview(interview_id, user, db)
    require_hiring_team(interview.application.job, user)
    job = interview.application.job
    result = await suggest_interview_questions(job.title, job_text_for_ranking(job))
    return Envelope(data=result.output, fallback=result.fallback, warning=result.warning)
