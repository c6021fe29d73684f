"""
Faculty account API

Endpoints:
- POST /faculty - Register and receive a token
- POST /faculty/signin - Sign in with email/password
- GET /faculty/faculty-details - Profile of the token holder
- GET /faculty/{id} - Public profile
- PATCH /faculty - Partial profile update (token holder)
- DELETE /faculty - Delete own account
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import accounts
from ..database import get_db
from ..errors import NotFound, Unauthorized
from ..schemas import FacultyOut, FacultyUpdate, SigninRequest, SignupRequest, serialize
from ..security import TokenIssuer, current_faculty_id, get_token_issuer

router = APIRouter(prefix="/faculty", tags=["faculty"])
logger = logging.getLogger(__name__)


@router.post("", status_code=201)
def signup(
    body: SignupRequest,
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    faculty = accounts.register(db, body.email, body.name, body.password, body.department)
    token = issuer.issue(
        faculty.id,
        {"email": faculty.email, "name": faculty.name, "department": faculty.department},
    )
    return {
        "message": "Faculty created successfully",
        "token": token,
        "faculty": {"id": faculty.id},
    }


@router.post("/signin")
def signin(
    body: SigninRequest,
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    try:
        faculty = accounts.authenticate(db, body.email, body.password)
    except NotFound as exc:
        # Unknown email is reported as 401 over HTTP
        raise Unauthorized(exc.message)
    return {
        "message": "Welcome, you are logged in",
        "token": issuer.issue(faculty.id),
        "faculty": {"id": faculty.id},
    }


@router.get("/faculty-details")
def get_faculty_by_token(
    faculty_id: int = Depends(current_faculty_id),
    db: Session = Depends(get_db),
):
    faculty = accounts.get_faculty(db, faculty_id)
    return {"faculty": serialize(FacultyOut, faculty), "message": "Faculty found"}


@router.get("/{faculty_id}")
def get_faculty_by_id(faculty_id: int, db: Session = Depends(get_db)):
    faculty = accounts.get_faculty(db, faculty_id)
    return {"faculty": serialize(FacultyOut, faculty), "message": "Faculty found"}


@router.patch("")
def update_faculty(
    body: FacultyUpdate,
    faculty_id: int = Depends(current_faculty_id),
    db: Session = Depends(get_db),
):
    updates = body.model_dump(exclude_unset=True, exclude_none=True)
    faculty = accounts.update_profile(db, faculty_id, updates)
    return {"message": "Faculty updated successfully", "faculty": serialize(FacultyOut, faculty)}


@router.delete("")
def delete_faculty(
    faculty_id: int = Depends(current_faculty_id),
    db: Session = Depends(get_db),
):
    accounts.remove(db, faculty_id)
    return {"message": "Faculty deleted successfully"}
