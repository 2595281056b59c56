"""
Drill-down navigation: Home → Universities → Degrees → Semesters → Subjects → Resources.

The Navigator owns the current view and the selection chain
(university, degree, semester, subject). Each selection belongs to the view
it is picked in:

    UNIVERSITIES → university
    DEGREES      → degree
    SEMESTERS    → semester
    SUBJECTS     → subject

Invariant: at any view, selections belonging to views below it are None and
the ones required to reach it are set. University is optional everywhere
(degrees can be browsed without picking a university first).

Every transition dispatches exactly one fetch for the destination view and
replaces `items`, so child rows are never reused after an ancestor changes.
`transitions` counts them; views that load their own data (the degree
comments) compare it to tell a fresh entry from a rerender.
Leaving home drops any search keystroke still waiting on its debounce.
"""

import logging
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any

from catalog.client import CatalogClient
from catalog.models import Degree, Semester, Subject, University
from catalog.search import SearchEngine

log = logging.getLogger(__name__)


class View(IntEnum):
    HOME         = 0
    UNIVERSITIES = 1
    DEGREES      = 2
    SEMESTERS    = 3
    SUBJECTS     = 4
    RESOURCES    = 5


# Selection field picked in each view, top to bottom
_OWNED_BY = {
    View.UNIVERSITIES: "university",
    View.DEGREES:      "degree",
    View.SEMESTERS:    "semester",
    View.SUBJECTS:     "subject",
}

# Selections that must be set to stand in a view
_REQUIRED = {
    View.HOME:         (),
    View.UNIVERSITIES: (),
    View.DEGREES:      (),
    View.SEMESTERS:    ("degree",),
    View.SUBJECTS:     ("degree", "semester"),
    View.RESOURCES:    ("degree", "semester", "subject"),
}


class NavigationError(ValueError):
    """A transition was requested from the wrong view or with a mismatched row."""


@dataclass(frozen=True)
class Selection:
    university: University | None = None
    degree: Degree | None = None
    semester: Semester | None = None
    subject: Subject | None = None

    def up_to(self, view: View) -> "Selection":
        """Copy keeping only the selections owned by `view` and the views above it."""
        cleared = {
            field: None for owner, field in _OWNED_BY.items() if owner > view
        }
        return replace(self, **cleared)


def check_invariant(view: View, selection: Selection) -> None:
    for owner, field in _OWNED_BY.items():
        if owner > view and getattr(selection, field) is not None:
            raise NavigationError(f"{field} is set below {view.name}")
    for field in _REQUIRED[view]:
        if getattr(selection, field) is None:
            raise NavigationError(f"{view.name} requires {field}")


class Navigator:
    def __init__(self, client: CatalogClient, search: SearchEngine | None = None):
        self.client = client
        self.search = search or SearchEngine(client)
        self.view = View.HOME
        self.selection = Selection()
        self.items: list[Any] = []
        self.transitions = 0

    # ------------------------------------------------------------------
    # Entry points (clear the chain)
    # ------------------------------------------------------------------

    def go_home(self) -> None:
        self._move(View.HOME, Selection())

    def show_universities(self) -> None:
        self._move(View.UNIVERSITIES, Selection())

    def show_degrees(self) -> None:
        """Browse every active degree without choosing a university."""
        self._move(View.DEGREES, Selection())

    # ------------------------------------------------------------------
    # Forward
    # ------------------------------------------------------------------

    def select_university(self, university: University) -> None:
        self._expect(View.UNIVERSITIES)
        self._move(View.DEGREES, Selection(university=university))

    def select_degree(self, degree: Degree) -> None:
        self._expect(View.DEGREES)
        university = self.selection.university
        if university is not None and degree.university_id != university.id:
            raise NavigationError(f"Degree {degree.code} is not offered by {university.code}")
        self._move(View.SEMESTERS, Selection(university=university, degree=degree))

    def select_semester(self, semester: Semester) -> None:
        self._expect(View.SEMESTERS)
        if semester.degree_id != self.selection.degree.id:
            raise NavigationError(f"Semester {semester.name} belongs to another degree")
        self._move(
            View.SUBJECTS,
            replace(self.selection.up_to(View.DEGREES), semester=semester),
        )

    def select_subject(self, subject: Subject) -> None:
        self._expect(View.SUBJECTS)
        if subject.semester_id != self.selection.semester.id:
            raise NavigationError(f"Subject {subject.code} belongs to another semester")
        self._move(View.RESOURCES, replace(self.selection, subject=subject))

    # ------------------------------------------------------------------
    # Back
    # ------------------------------------------------------------------

    def back(self) -> None:
        """Move exactly one level up the chain."""
        if self.view is View.HOME:
            raise NavigationError("Already at home")
        self.back_to(View(self.view - 1))

    def back_to(self, view: View) -> None:
        """
        Jump up to an ancestor view (breadcrumb).

        Selections picked in views below the destination are cleared; the
        destination's own selection and everything above it are kept, so
        backing from Resources to Degrees leaves university and degree set.
        """
        view = View(view)
        if view >= self.view:
            raise NavigationError(f"{view.name} is not above {self.view.name}")
        if view is View.HOME:
            self.go_home()
            return
        self._move(view, self.selection.up_to(view))

    # ------------------------------------------------------------------
    # Breadcrumb
    # ------------------------------------------------------------------

    def trail(self) -> list[tuple[View, str]]:
        """(view, label) pairs from Universities down to the current view."""
        if self.view is View.HOME:
            return []
        s = self.selection
        crumbs = [(View.UNIVERSITIES, "Universities")]
        if self.view >= View.DEGREES:
            crumbs.append((View.DEGREES, s.university.name if s.university else "All Degrees"))
        if self.view >= View.SEMESTERS:
            crumbs.append((View.SEMESTERS, s.degree.name))
        if self.view >= View.SUBJECTS:
            crumbs.append((View.SUBJECTS, s.semester.name))
        if self.view >= View.RESOURCES:
            crumbs.append((View.RESOURCES, s.subject.name))
        return crumbs

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _expect(self, view: View) -> None:
        if self.view is not view:
            raise NavigationError(f"Cannot do that from {self.view.name}; expected {view.name}")

    def _move(self, view: View, selection: Selection) -> None:
        check_invariant(view, selection)
        if view is not View.HOME:
            self.search.cancel()
        self.view = view
        self.selection = selection
        self.transitions += 1
        self.items = self._fetch()
        log.info("view=%s  items=%d", view.name, len(self.items))

    def _fetch(self) -> list[Any]:
        s = self.selection
        if self.view is View.HOME:
            self.search.refresh()
            return self.search.visible
        if self.view is View.UNIVERSITIES:
            return self.client.list_universities()
        if self.view is View.DEGREES:
            return self.client.list_degrees(s.university.id if s.university else None)
        if self.view is View.SEMESTERS:
            return self.client.list_semesters(s.degree.id)
        if self.view is View.SUBJECTS:
            return self.client.list_subjects(s.semester.id)
        return self.client.list_subject_resources(s.subject.id)
