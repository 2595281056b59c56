"""
Per-degree comments with moderation.

Only approved comments are listed (newest first). New comments are inserted
without is_approved, so the backend default keeps them hidden until a
moderator approves them; the board therefore never re-fetches or shows a
comment it has just submitted.

Form rules: name and comment text are required after trimming, email is
optional. A rejected or failed submission leaves the form as typed so the
user can retry.

CommentSection re-fetches the list each time a degree is entered, so
comments approved in the meantime show up on the next visit.
"""

import logging
from dataclasses import dataclass

from catalog.backend import BackendError
from catalog.client import CatalogClient
from catalog.models import Comment, CommentDraft

log = logging.getLogger(__name__)

SUBMITTED_TITLE   = "Comment Submitted"
SUBMITTED_MESSAGE = "Your comment has been submitted for review and will appear once approved."
REQUIRED_MESSAGE  = "Please fill in all required fields"
FAILED_MESSAGE    = "Failed to submit comment. Please try again."


class CommentValidationError(ValueError):
    pass


@dataclass(frozen=True)
class Notice:
    """A user-facing toast."""

    title: str
    description: str
    is_error: bool = False


@dataclass
class CommentForm:
    user_name: str = ""
    user_email: str = ""
    comment_text: str = ""

    def to_draft(self, degree_id: str) -> CommentDraft:
        name = self.user_name.strip()
        text = self.comment_text.strip()
        if not name or not text:
            raise CommentValidationError(REQUIRED_MESSAGE)
        return CommentDraft(
            degree_id=degree_id,
            user_name=name,
            user_email=self.user_email.strip() or None,
            comment_text=text,
        )


class CommentBoard:
    def __init__(self, client: CatalogClient, degree_id: str):
        self.client    = client
        self.degree_id = degree_id
        self.comments: list[Comment] = []
        self.form = CommentForm()

    def load(self) -> list[Comment]:
        self.comments = self.client.list_comments(self.degree_id)
        return self.comments

    def submit(self) -> Notice:
        try:
            draft = self.form.to_draft(self.degree_id)
        except CommentValidationError as exc:
            return Notice("Error", str(exc), is_error=True)

        try:
            self.client.submit_comment(draft)
        except BackendError as exc:
            log.error("Error submitting comment for degree %s: %s", self.degree_id, exc)
            return Notice("Error", FAILED_MESSAGE, is_error=True)

        self.form = CommentForm()
        return Notice(SUBMITTED_TITLE, SUBMITTED_MESSAGE)


class CommentSection:
    """
    The comment board of the degree currently on screen.

    The board is rebuilt and re-fetched whenever the degree's view is entered
    anew (a different degree, or the same one after navigating away), and
    reused across rerenders of the same entry so a typed form survives.
    """

    def __init__(self, client: CatalogClient):
        self.client = client
        self.board: CommentBoard | None = None
        self._entry: tuple[str, int] | None = None

    def enter(self, degree_id: str, entry: int) -> CommentBoard:
        if self.board is None or self._entry != (degree_id, entry):
            self.board = CommentBoard(self.client, degree_id)
            self.board.load()
            self._entry = (degree_id, entry)
        return self.board
