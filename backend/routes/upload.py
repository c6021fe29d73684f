"""
Content hierarchy and upload API

Endpoints:
- POST /upload/branches - Create a branch with its year skeleton
- GET /upload/branches, GET /upload/branches/{id} - Listing / detail
- POST /upload/subject-Content - Articles and files of one subject
- GET /upload/posts/faculty - Caller's posts grouped by branch/year/subject
- POST /upload/branches/{branchId}/subjects - Add a subject to a year
- POST /upload/branches/{branchId}/upload - Post an article or upload a file
"""
import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy.orm import Session

from .. import hierarchy, uploads
from ..config import settings
from ..database import get_db
from ..errors import BadRequest, ValidationFailed, field_errors
from ..schemas import (
    ArticleOut,
    AuthorPostsGroup,
    BranchCreate,
    BranchOut,
    FileAssetOut,
    SubjectContentRequest,
    SubjectCreate,
    SubjectOut,
    UploadMetadata,
    YearOut,
    serialize,
)
from ..security import current_faculty_id

router = APIRouter(prefix="/upload", tags=["upload"])
logger = logging.getLogger(__name__)


# TODO: restrict branch creation to admin accounts once faculty roles exist
@router.post("/branches", status_code=201)
def create_branch(body: BranchCreate, db: Session = Depends(get_db)):
    branch = hierarchy.create_branch(db, body.branch_name, [y.label for y in body.years])
    return {"message": "Branch created", "branch": serialize(BranchOut, branch)}


@router.get("/branches")
def get_all_branches(db: Session = Depends(get_db)):
    return serialize(BranchOut, hierarchy.list_branches(db))


@router.get("/branches/{branch_id}")
def get_branch_by_id(branch_id: int, db: Session = Depends(get_db)):
    return serialize(BranchOut, hierarchy.get_branch(db, branch_id))


@router.post("/subject-Content")
def get_subject_content(body: SubjectContentRequest, db: Session = Depends(get_db)):
    content = hierarchy.get_subject_content(db, body.branch_id, body.year_id, body.subject_id)
    return {
        "articles": serialize(ArticleOut, content["articles"]),
        "files": serialize(FileAssetOut, content["files"]),
    }


@router.get("/posts/faculty")
def get_posts_by_faculty(
    faculty_id: int = Depends(current_faculty_id),
    db: Session = Depends(get_db),
):
    results = hierarchy.list_posts_by_author(db, faculty_id)
    return {"message": "Posts fetched successfully", "results": serialize(AuthorPostsGroup, results)}


@router.post("/branches/{branch_id}/subjects", status_code=201)
def add_subject(
    branch_id: int,
    body: SubjectCreate,
    faculty_id: int = Depends(current_faculty_id),
    db: Session = Depends(get_db),
):
    year = hierarchy.add_subject(db, branch_id, body.year_id, body.subject_name, faculty_id)
    return {"message": "Subject added successfully", "year": serialize(YearOut, year)}


def _parse_metadata(data: str) -> UploadMetadata:
    try:
        payload = json.loads(data)
    except ValueError:
        raise BadRequest("Invalid JSON format in form data")
    try:
        return UploadMetadata.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailed(field_errors(exc.errors()))


@router.post("/branches/{branch_id}/upload", status_code=201)
async def upload_article_or_file(
    branch_id: int,
    data: str = Form(...),
    file: Optional[UploadFile] = File(None),
    faculty_id: int = Depends(current_faculty_id),
    db: Session = Depends(get_db),
):
    """Handles article posts and file uploads into one subject."""
    meta = _parse_metadata(data)

    # Resolve the subject before touching the disk so a bad id leaves no file behind
    await run_in_threadpool(hierarchy.get_subject, db, branch_id, meta.year_id, meta.subject_id)

    stored = None
    if meta.type == "file" and file is not None and file.filename:
        contents = await uploads.read_limited(file, settings.max_upload_bytes)
        stored = await uploads.store(contents, file.filename, settings.max_upload_bytes)

    draft = hierarchy.PostDraft(
        type=meta.type,
        posted_by_id=faculty_id,
        posted_by_name=meta.posted_by_name,
        posted_by_branch=meta.posted_by_branch,
        body=meta.content,
        file=stored,
        display_name=meta.file_name,
    )
    try:
        subject = await run_in_threadpool(
            hierarchy.add_post, db, branch_id, meta.year_id, meta.subject_id, draft
        )
    except Exception:
        if stored is not None:
            await run_in_threadpool(uploads.discard, stored.stored_name)
        raise

    # Serializing walks lazy relationships, which hits the database too
    payload = await run_in_threadpool(serialize, SubjectOut, subject)
    return {"message": f"{meta.type} uploaded successfully", "subject": payload}
