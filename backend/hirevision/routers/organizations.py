import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from hirevision.database import get_db
from hirevision.dependencies import get_current_user, require_role
from hirevision.models.organization import Organization
from hirevision.models.user import User
from hirevision.schemas.organization import MemberAdd, OrganizationCreate, OrganizationResponse
from hirevision.services.auth_service import PUBLIC_EMAIL_DOMAINS
from hirevision.utils.timestamps import utc_now

router = APIRouter(
    prefix="/organizations",
    tags=["organizations"],
    dependencies=[Depends(get_current_user)],
)


def _org_to_response(org: Organization, db: Session) -> OrganizationResponse:
    member_count = db.query(func.count(User.id)).filter(User.organization_id == org.id).scalar()
    return OrganizationResponse(
        id=org.id,
        name=org.name,
        domains=org.domains or [],
        member_count=member_count,
        created_at=org.created_at,
    )


@router.post("", response_model=OrganizationResponse, status_code=201)
async def create_organization(
    req: OrganizationCreate,
    user: User = Depends(require_role("Recruiter")),
    db: Session = Depends(get_db),
):
    now = utc_now()
    org = Organization(
        id=str(uuid.uuid4()),
        name=req.name,
        domains=[
            d for d in (d.strip().lower() for d in req.domains)
            if d and d not in PUBLIC_EMAIL_DOMAINS
        ],
        created_at=now,
    )
    db.add(org)
    db.flush()
    # The creating recruiter joins the new organization.
    user.organization_id = org.id
    user.updated_at = now
    db.commit()
    db.refresh(org)
    return _org_to_response(org, db)


@router.get("/{org_id}", response_model=OrganizationResponse)
async def get_organization(org_id: str, db: Session = Depends(get_db)):
    org = db.get(Organization, org_id)
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")
    return _org_to_response(org, db)


@router.post("/{org_id}/members", response_model=OrganizationResponse)
async def add_member(
    org_id: str,
    req: MemberAdd,
    user: User = Depends(require_role("Recruiter")),
    db: Session = Depends(get_db),
):
    """Bring an existing recruiter or interviewer account into the organization."""
    org = db.get(Organization, org_id)
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")
    if user.organization_id != org.id:
        raise HTTPException(status_code=403, detail="Only members can add to this organization")

    member = db.query(User).filter_by(email=req.email.strip().lower()).first()
    if not member:
        raise HTTPException(status_code=404, detail="User not found")
    if member.role not in ("Recruiter", "Interviewer"):
        raise HTTPException(status_code=400, detail="Only recruiters and interviewers can join an organization")
    if member.organization_id and member.organization_id != org.id:
        raise HTTPException(status_code=409, detail="User already belongs to another organization")

    member.organization_id = org.id
    member.updated_at = utc_now()
    db.commit()
    return _org_to_response(org, db)
