from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func

from .database import Base
from . import security


class Faculty(Base):
    __tablename__ = "faculties"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(50), nullable=False, unique=True, index=True)
    password_hash = Column(String(100), nullable=False)
    name = Column(String(30), nullable=False)
    department = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def set_password(self, plain: str) -> None:
        """The only place a password is hashed; call it when the password changes."""
        self.password_hash = security.hash_password(plain)

    def check_password(self, plain: str) -> bool:
        return security.check_password(plain, self.password_hash)


class Branch(Base):
    __tablename__ = "branches"
    id = Column(Integer, primary_key=True, index=True)
    branch_name = Column(String(50), nullable=False, unique=True)

    years = relationship(
        "Year", back_populates="branch", order_by="Year.id", cascade="all, delete-orphan"
    )


class Year(Base):
    __tablename__ = "years"
    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="CASCADE"), nullable=False, index=True)
    label = Column(String(10), nullable=False)  # First | Second | Third | Final

    branch = relationship("Branch", back_populates="years")
    subjects = relationship(
        "Subject", back_populates="year", order_by="Subject.id", cascade="all, delete-orphan"
    )


class Subject(Base):
    __tablename__ = "subjects"
    __table_args__ = (
        UniqueConstraint("year_id", "name_key", name="uix_subject_year_name"),
    )
    id = Column(Integer, primary_key=True, index=True)
    year_id = Column(Integer, ForeignKey("years.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    name_key = Column(String(50), nullable=False)  # lowercased name
    created_by_id = Column(Integer, nullable=False)

    year = relationship("Year", back_populates="subjects")
    articles = relationship(
        "Article", back_populates="subject", order_by="Article.id", cascade="all, delete-orphan"
    )
    files = relationship(
        "FileAsset", back_populates="subject", order_by="FileAsset.id", cascade="all, delete-orphan"
    )

    @validates("name")
    def _sync_name_key(self, key, value):
        self.name_key = value.lower()
        return value

    @property
    def posts(self) -> dict:
        return {"articles": self.articles, "files": self.files}


# Posts reference the author by id only; deleting a faculty account keeps them.
class Article(Base):
    __tablename__ = "articles"
    id = Column(Integer, primary_key=True, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    body = Column(Text, nullable=False)
    posted_by_id = Column(Integer, nullable=False, index=True)
    posted_by_name = Column(String(50), nullable=False)
    posted_by_branch = Column(String(50), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    subject = relationship("Subject", back_populates="articles")


class FileAsset(Base):
    __tablename__ = "file_assets"
    id = Column(Integer, primary_key=True, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    display_name = Column(String(255), nullable=False)
    stored_name = Column(String(255), nullable=False, unique=True)
    original_name = Column(String(255), nullable=False)
    public_url = Column(Text, nullable=False)
    posted_by_id = Column(Integer, nullable=False, index=True)
    posted_by_name = Column(String(50), nullable=False)
    posted_by_branch = Column(String(50), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    subject = relationship("Subject", back_populates="files")
