from datetime import datetime
from typing import Annotated, Any, List, Literal, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

YearLabel = Literal["First", "Second", "Third", "Final"]
PostType = Literal["article", "file"]


class CamelModel(BaseModel):
    """Python attributes in snake_case, JSON keys in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RequestModel(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)


def _normalize_email(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("Invalid email format")
    return value.lower()


Email = Annotated[str, Field(min_length=3, max_length=50), AfterValidator(_normalize_email)]


# Faculty

class SignupRequest(RequestModel):
    email: Email
    name: str = Field(min_length=1, max_length=30)
    password: str = Field(min_length=5, max_length=60)
    department: str = Field(min_length=1)


class SigninRequest(RequestModel):
    email: Email
    password: str = Field(min_length=5, max_length=50)


class FacultyUpdate(RequestModel):
    email: Optional[Email] = None
    name: Optional[str] = Field(None, min_length=1, max_length=30)
    password: Optional[str] = Field(None, min_length=5, max_length=50)
    department: Optional[str] = Field(None, min_length=1, max_length=30)


class FacultyOut(CamelModel):
    id: int
    email: str
    name: str
    department: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Content hierarchy

class YearIn(RequestModel):
    label: YearLabel = Field(validation_alias=AliasChoices("label", "years_subfolders"))


class BranchCreate(RequestModel):
    branch_name: str = Field(min_length=1, max_length=50)
    years: List[YearIn]


class SubjectCreate(RequestModel):
    year_id: int
    subject_name: str = Field(min_length=1, max_length=50)


class SubjectContentRequest(RequestModel):
    branch_id: int
    year_id: int
    subject_id: int


class UploadMetadata(RequestModel):
    """JSON payload sent in the ``data`` form field of an upload."""
    year_id: int
    subject_id: int
    type: PostType
    content: Optional[str] = None
    posted_by_name: str = Field(min_length=1, max_length=50)
    posted_by_branch: str = Field(min_length=1, max_length=50)
    file_name: Optional[str] = Field(None, max_length=100)


class ArticleOut(CamelModel):
    id: int
    body: str
    posted_by_id: int
    posted_by_name: str
    posted_by_branch: str
    created_at: Optional[datetime] = None


class FileAssetOut(CamelModel):
    id: int
    display_name: str
    stored_name: str
    original_name: str
    public_url: str
    posted_by_id: int
    posted_by_name: str
    posted_by_branch: str
    created_at: Optional[datetime] = None


class PostsOut(CamelModel):
    articles: List[ArticleOut] = []
    files: List[FileAssetOut] = []


class SubjectOut(CamelModel):
    id: int
    name: str
    created_by_id: int
    posts: PostsOut


class YearOut(CamelModel):
    id: int
    label: YearLabel
    subjects: List[SubjectOut] = []


class BranchOut(CamelModel):
    id: int
    branch_name: str
    years: List[YearOut] = []


class AuthorPostsGroup(CamelModel):
    branch_name: str
    year: str
    subject: str
    articles: List[ArticleOut]
    files: List[FileAssetOut]


def serialize(schema, obj: Any) -> Any:
    """Render an ORM object (or a list of them) as camelCase JSON-ready data."""
    if isinstance(obj, list):
        return [serialize(schema, item) for item in obj]
    return schema.model_validate(obj).model_dump(by_alias=True, mode="json")
