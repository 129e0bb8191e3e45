from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from hirevision.config import settings
from hirevision.database import get_db
from hirevision.dependencies import get_current_user
from hirevision.models.user import User
from hirevision.schemas.common import Envelope
from hirevision.services.resume_text import extract_resume_text
from hirevision.services.storage_service import get_storage, key_segments
from hirevision.utils.filesystem import storage_key
from hirevision.utils.timestamps import utc_now

router = APIRouter(
    prefix="/storage",
    tags=["storage"],
    dependencies=[Depends(get_current_user)],
)


@router.post("/resumes", response_model=Envelope, response_model_exclude_none=True, status_code=201)
async def upload_resume(
    file: UploadFile = File(...),
    candidate_id: str = Form(...),
    file_name: str | None = Form(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if candidate_id != user.id:
        raise HTTPException(status_code=403, detail="You can only upload your own resume")

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="File is too large")

    name = file_name or file.filename or "resume"
    key = storage_key("resumes", candidate_id, name)
    stored = await get_storage().put(key, content, file.content_type)

    resume_text = extract_resume_text(content, name, file.content_type)
    user.resume_key = key
    # Text always follows the current file, even when none could be extracted
    user.resume_text = resume_text or None
    user.updated_at = utc_now()
    db.commit()

    return Envelope(data={**stored, "text_extracted": bool(resume_text), "text_length": len(resume_text)})


@router.get("/{key:path}")
async def download(key: str, user: User = Depends(get_current_user)):
    parts = key_segments(key)
    if parts[0] == "resumes" and user.role == "Candidate" and (len(parts) < 2 or parts[1] != user.id):
        raise HTTPException(status_code=403, detail="You do not have access to this file")
    data, content_type = await get_storage().get(key)
    return Response(content=data, media_type=content_type)
