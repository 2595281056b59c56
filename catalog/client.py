"""
Catalog client: the scoped queries behind every view.

Each list_* call is a filtered, sorted projection restricted to active or
published rows. Reads are fail-soft: a backend error or a malformed row is
logged and the call returns an empty list, so an outage shows up as an empty
state instead of breaking navigation.

    list_universities()                   is_active              name asc
    list_degrees(university_id=None)      is_active [+ univ]     name asc
    list_semesters(degree_id)             degree + is_active     semester_number asc
    list_subjects(semester_id)            semester + is_active   name asc
    list_subject_resources(subject_id)    subject + published    created_at desc
    list_recent_resources(search="")      published + (recent | search)
                                                                 created_at desc, 6 / 50
    list_comments(degree_id)              degree + approved      created_at desc

get_resource() and submit_comment() raise BackendError to their caller;
increment_download_count() is best-effort and never raises.
"""

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from catalog import config
from catalog.backend import BackendError, CatalogBackend
from catalog.models import (
    Comment,
    CommentDraft,
    Degree,
    Resource,
    Semester,
    Subject,
    University,
)

log = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

SEARCH_COLUMNS = ("title", "subject", "course", "description")
COMMENT_COLUMNS = "id, user_name, comment_text, created_at"


class CatalogClient:
    def __init__(
        self,
        backend: CatalogBackend,
        resource_table: str = config.RESOURCE_TABLE,
        bucket: str = config.STORAGE_BUCKET,
    ):
        self.backend        = backend
        self.resource_table = resource_table
        self.bucket         = bucket

    def _fetch(self, model: type[M], table: str, **query: Any) -> list[M]:
        try:
            rows = self.backend.select(table, **query)
            return [model.model_validate(row) for row in rows]
        except (BackendError, ValidationError) as exc:
            log.error("Error fetching %s: %s", table, exc)
            return []

    # ------------------------------------------------------------------
    # Drill-down chain
    # ------------------------------------------------------------------

    def list_universities(self) -> list[University]:
        return self._fetch(University, "universities", eq={"is_active": True}, order="name")

    def list_degrees(self, university_id: str | None = None) -> list[Degree]:
        eq: dict[str, Any] = {"is_active": True}
        if university_id is not None:
            eq["university_id"] = university_id
        return self._fetch(Degree, "degrees", eq=eq, order="name")

    def list_semesters(self, degree_id: str) -> list[Semester]:
        return self._fetch(
            Semester, "semesters",
            eq={"degree_id": degree_id, "is_active": True},
            order="semester_number",
        )

    def list_subjects(self, semester_id: str) -> list[Subject]:
        return self._fetch(
            Subject, "subjects",
            eq={"semester_id": semester_id, "is_active": True},
            order="name",
        )

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def list_subject_resources(self, subject_id: str) -> list[Resource]:
        return self._fetch(
            Resource, self.resource_table,
            eq={"subject_id": subject_id, "is_published": True},
            order="created_at", descending=True,
        )

    def list_recent_resources(self, search: str = "") -> list[Resource]:
        """
        Home page listing.

        An empty (or blank) search returns the featured rows (show_in_recent),
        newest first, capped at RECENT_LIMIT. A non-empty search drops the
        featured predicate and instead matches the term case-insensitively
        against title, subject, course or description, capped at SEARCH_LIMIT.
        """
        term = search.strip()
        if not term:
            return self._fetch(
                Resource, self.resource_table,
                eq={"is_published": True, "show_in_recent": True},
                order="created_at", descending=True,
                limit=config.RECENT_LIMIT,
            )
        return self._fetch(
            Resource, self.resource_table,
            eq={"is_published": True},
            match_any={column: term for column in SEARCH_COLUMNS},
            order="created_at", descending=True,
            limit=config.SEARCH_LIMIT,
        )

    def get_resource(self, resource_id: int) -> Resource | None:
        """
        One published resource, or None if there is no such row.

        Unlike the listings this is not fail-soft: a backend failure raises
        BackendError so callers can tell "missing" from "unreachable".
        """
        rows = self.backend.select(
            self.resource_table,
            eq={"id": resource_id, "is_published": True},
            limit=1,
        )
        if not rows:
            return None
        try:
            return Resource.model_validate(rows[0])
        except ValidationError as exc:
            log.error("Malformed resource %s: %s", resource_id, exc)
            return None

    def increment_download_count(self, resource_id: int) -> bool:
        try:
            self.backend.rpc("increment_download_count", {"resource_id": resource_id})
        except BackendError as exc:
            log.warning("Could not increment download count for %s: %s", resource_id, exc)
            return False
        return True

    def resolve_download_url(self, file_path: str, download_as: str | None = None) -> str:
        """Absolute URLs pass through unchanged; storage paths become public URLs."""
        if file_path.startswith("http"):
            return file_path
        return self.backend.public_url(self.bucket, file_path, download=download_as)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def list_comments(self, degree_id: str) -> list[Comment]:
        return self._fetch(
            Comment, "degree_comments",
            columns=COMMENT_COLUMNS,
            eq={"degree_id": degree_id, "is_approved": True},
            order="created_at", descending=True,
        )

    def submit_comment(self, draft: CommentDraft) -> None:
        self.backend.insert("degree_comments", draft.model_dump())
