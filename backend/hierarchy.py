"""
Content hierarchy store: Branch -> Year -> Subject -> posts.

A Branch owns its Years, a Year owns its Subjects and a Subject owns its
Articles and FileAssets. Children are always reached through their parent,
so a Year id that belongs to another Branch is reported as not found.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from .errors import BadRequest, Conflict, NotFound
from .models import Article, Branch, FileAsset, Subject, Year
from .uploads import StoredFile

logger = logging.getLogger(__name__)


@dataclass
class PostDraft:
    type: str  # "article" | "file"
    posted_by_id: int
    posted_by_name: str
    posted_by_branch: str
    body: Optional[str] = None
    file: Optional[StoredFile] = None
    display_name: Optional[str] = None


def _full_tree():
    subjects = selectinload(Branch.years).selectinload(Year.subjects)
    return [
        subjects.selectinload(Subject.articles),
        subjects.selectinload(Subject.files),
    ]


def list_branches(db: Session) -> List[Branch]:
    return db.query(Branch).options(*_full_tree()).order_by(Branch.id).all()


def get_branch(db: Session, branch_id: int) -> Branch:
    branch = db.get(Branch, branch_id)
    if branch is None:
        raise NotFound("Branch not found")
    return branch


def create_branch(db: Session, branch_name: str, year_labels: Sequence[str]) -> Branch:
    if db.query(Branch).filter(Branch.branch_name == branch_name).first() is not None:
        raise Conflict("Branch already exists")

    branch = Branch(branch_name=branch_name, years=[Year(label=label) for label in year_labels])
    db.add(branch)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Branch already exists")
    db.refresh(branch)
    logger.info("Created branch %s (%s) with %d years", branch.id, branch_name, len(branch.years))
    return branch


def _find_year(branch: Branch, year_id: int) -> Year:
    for year in branch.years:
        if year.id == year_id:
            return year
    raise NotFound("Year not found in this branch")


def _find_subject(year: Year, subject_id: int) -> Subject:
    for subject in year.subjects:
        if subject.id == subject_id:
            return subject
    raise NotFound("Subject not found in this year")


def get_subject(db: Session, branch_id: int, year_id: int, subject_id: int) -> Subject:
    year = _find_year(get_branch(db, branch_id), year_id)
    return _find_subject(year, subject_id)


def add_subject(db: Session, branch_id: int, year_id: int, subject_name: str, creator_id: int) -> Year:
    year = _find_year(get_branch(db, branch_id), year_id)

    key = subject_name.lower()
    if any(s.name_key == key for s in year.subjects):
        raise Conflict("Subject already exists in this year")

    year.subjects.append(Subject(name=subject_name, created_by_id=creator_id))
    try:
        db.commit()
    except IntegrityError:
        # uix_subject_year_name caught a concurrent insert of the same name
        db.rollback()
        raise Conflict("Subject already exists in this year")
    db.refresh(year)
    logger.info("Added subject %r to year %s of branch %s", subject_name, year_id, branch_id)
    return year


def get_subject_content(db: Session, branch_id: int, year_id: int, subject_id: int) -> Dict[str, list]:
    subject = get_subject(db, branch_id, year_id, subject_id)
    return {"articles": list(subject.articles), "files": list(subject.files)}


def add_post(db: Session, branch_id: int, year_id: int, subject_id: int, post: PostDraft) -> Subject:
    subject = get_subject(db, branch_id, year_id, subject_id)

    if post.type == "article":
        if not post.body or not post.body.strip():
            raise BadRequest("Content is required for article")
        subject.articles.append(Article(
            body=post.body,
            posted_by_id=post.posted_by_id,
            posted_by_name=post.posted_by_name,
            posted_by_branch=post.posted_by_branch,
        ))
    elif post.type == "file":
        if post.file is None:
            raise BadRequest("File is required")
        subject.files.append(FileAsset(
            display_name=post.display_name or post.file.original_name,
            stored_name=post.file.stored_name,
            original_name=post.file.original_name,
            public_url=post.file.public_url,
            posted_by_id=post.posted_by_id,
            posted_by_name=post.posted_by_name,
            posted_by_branch=post.posted_by_branch,
        ))
    else:
        raise BadRequest(f"Unknown post type: {post.type}")

    db.commit()
    db.refresh(subject)
    logger.info("Faculty %s posted %s to subject %s", post.posted_by_id, post.type, subject_id)
    return subject


def list_posts_by_author(db: Session, author_id: int) -> List[dict]:
    """Collect every post by ``author_id``, grouped by branch, year and subject.

    Full scan over all branches with no index on authorship, so the cost
    grows with the total number of posts.
    """
    results = []
    for branch in list_branches(db):
        for year in branch.years:
            for subject in year.subjects:
                articles = [a for a in subject.articles if a.posted_by_id == author_id]
                files = [f for f in subject.files if f.posted_by_id == author_id]
                if articles or files:
                    results.append({
                        "branch_name": branch.branch_name,
                        "year": year.label,
                        "subject": subject.name,
                        "articles": articles,
                        "files": files,
                    })
    return results
