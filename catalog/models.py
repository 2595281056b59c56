"""
Row models for the catalog relations.

Rows come back from the backend as plain dicts; these models give the rest
of the code stable field names. Extra columns (created_at on catalog rows,
admin-only flags) are ignored.

    universities      → University
    degrees           → Degree       (university_id may be null: global degree)
    semesters         → Semester
    subjects          → Subject
    Exam-prep         → Resource
    degree_comments   → Comment / CommentDraft
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, field_validator


class University(BaseModel):
    id: str
    name: str
    code: str
    location: str | None = None
    is_active: bool = True


class Degree(BaseModel):
    id: str
    name: str
    code: str
    description: str | None = None
    university_id: str | None = None
    is_active: bool = True


class Semester(BaseModel):
    id: str
    degree_id: str
    semester_number: int
    name: str
    is_active: bool = True


class Subject(BaseModel):
    id: str
    semester_id: str
    name: str
    code: str
    description: str | None = None
    is_active: bool = True


class ResourceType(str, Enum):
    ALL            = "all"
    QUESTION_PAPER = "question_paper"
    SOLVED_PAPER   = "solved_paper"
    NOTES          = "notes"

    @property
    def label(self) -> str:
        return _TYPE_LABELS[self]


_TYPE_LABELS = {
    ResourceType.ALL:            "All Resources",
    ResourceType.QUESTION_PAPER: "Question Papers",
    ResourceType.SOLVED_PAPER:   "Solved Papers",
    ResourceType.NOTES:          "Study Notes",
}


class Resource(BaseModel):
    id: int
    title: str | None = None
    subject: str | None = None
    year: int | None = None
    course: str | None = None
    resource_type: str | None = None
    download_count: int = 0
    file_path: str | None = None
    description: str | None = None
    degree_id: str | None = None
    subject_id: str | None = None
    is_published: bool | None = None
    show_in_recent: bool = False
    created_at: datetime | None = None

    @field_validator("download_count", mode="before")
    @classmethod
    def _null_count(cls, v):
        # Column is nullable; a resource nobody downloaded reads as 0
        return 0 if v is None else v

    @property
    def type_label(self) -> str:
        return (self.resource_type or "").replace("_", " ")


class Comment(BaseModel):
    id: str
    user_name: str
    comment_text: str
    created_at: datetime
    degree_id: str | None = None
    user_email: str | None = None
    is_approved: bool | None = None


class CommentDraft(BaseModel):
    """
    Insert payload for degree_comments.

    Has no is_approved field: new rows take the backend default (false)
    and stay hidden until a moderator approves them.
    """

    degree_id: str
    user_name: str
    comment_text: str
    user_email: str | None = None
