"""
Credential store for faculty accounts.

Every function takes the request's SQLAlchemy session and raises
``backend.errors`` exceptions instead of returning status codes.
"""
import logging
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import Conflict, NotFound, Unauthorized
from .models import Faculty

logger = logging.getLogger(__name__)


def _find_by_email(db: Session, email: str) -> Faculty | None:
    return db.query(Faculty).filter(Faculty.email == email.lower()).first()


def get_faculty(db: Session, faculty_id: int) -> Faculty:
    faculty = db.get(Faculty, faculty_id)
    if faculty is None:
        raise NotFound("Faculty not found")
    return faculty


def register(db: Session, email: str, name: str, password: str, department: str) -> Faculty:
    if _find_by_email(db, email) is not None:
        raise Conflict("Faculty already exists")

    faculty = Faculty(email=email.lower(), name=name, department=department)
    faculty.set_password(password)
    db.add(faculty)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email
        db.rollback()
        raise Conflict("Faculty already exists")
    db.refresh(faculty)
    logger.info("Registered faculty %s (%s)", faculty.id, faculty.email)
    return faculty


def authenticate(db: Session, email: str, password: str) -> Faculty:
    faculty = _find_by_email(db, email)
    if faculty is None:
        raise NotFound("Faculty not found! Kindly register first")
    if not faculty.check_password(password):
        raise Unauthorized("Invalid password")
    return faculty


def update_profile(db: Session, faculty_id: int, updates: Dict[str, Any]) -> Faculty:
    """Apply only the fields present in ``updates``; a new password is rehashed."""
    faculty = get_faculty(db, faculty_id)

    email = updates.get("email")
    if email is not None and email.lower() != faculty.email:
        if _find_by_email(db, email) is not None:
            raise Conflict("Email already in use")
        faculty.email = email.lower()

    for field in ("name", "department"):
        if updates.get(field) is not None:
            setattr(faculty, field, updates[field])

    if updates.get("password"):
        faculty.set_password(updates["password"])

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Email already in use")
    db.refresh(faculty)
    return faculty


def remove(db: Session, faculty_id: int) -> None:
    """Delete the account. Posts attributed to it are left as they are."""
    faculty = get_faculty(db, faculty_id)
    db.delete(faculty)
    db.commit()
    logger.info("Deleted faculty %s", faculty_id)
