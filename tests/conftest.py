import pytest

from catalog.backend import BackendError
from catalog.client import CatalogClient


class InMemoryBackend:
    """
    Stand-in for SupabaseBackend that evaluates queries over dict rows.

    Supports the same select() arguments (eq, match_any, order, limit),
    records every call, and raises BackendError while `fail` is set.
    """

    def __init__(self, tables: dict[str, list[dict]] | None = None):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.calls: list[tuple] = []
        self.inserted: list[tuple[str, dict]] = []
        self.fail = False
        self.fail_rpc = False

    def select(self, table, *, columns="*", eq=None, match_any=None,
               order=None, descending=False, limit=None):
        self.calls.append(("select", table, dict(eq or {}), dict(match_any or {}), order, limit))
        if self.fail:
            raise BackendError(f"select {table} failed", 503)

        rows = list(self.tables.get(table, []))
        for column, value in (eq or {}).items():
            rows = [r for r in rows if r.get(column) == value]
        if match_any:
            rows = [
                r for r in rows
                if any(term.lower() in str(r.get(col) or "").lower() for col, term in match_any.items())
            ]
        if order:
            rows.sort(key=lambda r: (r.get(order) is None, r.get(order)), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return [dict(r) for r in rows]

    def insert(self, table, row):
        self.calls.append(("insert", table, dict(row)))
        if self.fail:
            raise BackendError(f"insert {table} failed", 500)
        self.inserted.append((table, dict(row)))
        stored = {"is_approved": False, "created_at": "2024-06-01T00:00:00+00:00",
                  "id": f"new-{len(self.inserted)}", **row}
        self.tables.setdefault(table, []).append(stored)

    def rpc(self, name, params):
        self.calls.append(("rpc", name, dict(params)))
        if self.fail or self.fail_rpc:
            raise BackendError(f"rpc {name} failed", 500)
        if name == "increment_download_count":
            for rows in self.tables.values():
                for r in rows:
                    if r.get("id") == params["resource_id"] and "download_count" in r:
                        r["download_count"] = (r["download_count"] or 0) + 1
        return None

    def public_url(self, bucket, path, download=None):
        self.calls.append(("public_url", bucket, path))
        url = f"https://storage.test/{bucket}/{path}"
        return f"{url}?download={download}" if download else url

    def selects(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "select"]


class FakeTimer:
    """threading.Timer replacement that only fires when told to."""

    created: list["FakeTimer"] = []

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False
        self.daemon = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function()


def _resource(id, title, *, resource_type="question_paper", created_at, subject=None,
              course=None, description=None, subject_id=None, show_in_recent=True,
              is_published=True, file_path=None, download_count=0):
    return {
        "id": id,
        "title": title,
        "subject": subject,
        "year": 2023,
        "course": course,
        "resource_type": resource_type,
        "download_count": download_count,
        "file_path": file_path if file_path is not None else f"papers/{id}.pdf",
        "description": description,
        "degree_id": "deg-bsc",
        "subject_id": subject_id,
        "is_published": is_published,
        "show_in_recent": show_in_recent,
        "created_at": created_at,
    }


@pytest.fixture
def tables():
    return {
        "universities": [
            {"id": "uni-b", "name": "Beta University", "code": "BU", "location": "Pune", "is_active": True},
            {"id": "uni-a", "name": "Alpha University", "code": "AU", "location": None, "is_active": True},
            {"id": "uni-x", "name": "Closed College", "code": "CC", "location": None, "is_active": False},
        ],
        "degrees": [
            {"id": "deg-bsc", "name": "BSc Mathematics", "code": "BSCM", "university_id": "uni-a", "is_active": True},
            {"id": "deg-ba", "name": "BA English", "code": "BAE", "university_id": "uni-a", "is_active": True},
            {"id": "deg-bcom", "name": "BCom", "code": "BCOM", "university_id": "uni-b", "is_active": True},
            {"id": "deg-global", "name": "Diploma in Data", "code": "DID", "university_id": None, "is_active": True},
            {"id": "deg-old", "name": "Archived Degree", "code": "OLD", "university_id": "uni-a", "is_active": False},
        ],
        "semesters": [
            {"id": "sem-2", "degree_id": "deg-bsc", "semester_number": 2, "name": "Semester II", "is_active": True},
            {"id": "sem-1", "degree_id": "deg-bsc", "semester_number": 1, "name": "Semester I", "is_active": True},
            {"id": "sem-ba1", "degree_id": "deg-ba", "semester_number": 1, "name": "Semester I", "is_active": True},
            {"id": "sem-x", "degree_id": "deg-bsc", "semester_number": 3, "name": "Semester III", "is_active": False},
        ],
        "subjects": [
            {"id": "sub-calc", "semester_id": "sem-1", "name": "Calculus", "code": "MTH101", "is_active": True},
            {"id": "sub-alg", "semester_id": "sem-1", "name": "Algebra", "code": "MTH102", "is_active": True},
            {"id": "sub-stat", "semester_id": "sem-2", "name": "Statistics", "code": "MTH201", "is_active": True},
        ],
        "Exam-prep": [
            _resource(1, "Calculus II Finals", subject="Calculus", course="BSc Maths",
                      subject_id="sub-calc", created_at="2024-03-01T00:00:00+00:00", download_count=4),
            _resource(2, "Physics Midterm", subject="Physics", course="BSc Physics",
                      created_at="2024-04-01T00:00:00+00:00", resource_type="notes"),
            _resource(3, "Algebra Notes", subject="Algebra", subject_id="sub-alg",
                      created_at="2024-02-01T00:00:00+00:00", resource_type="notes"),
            _resource(4, "Limits Worked Answers", subject="Maths", description="solved calculus limits",
                      subject_id="sub-calc", created_at="2024-01-01T00:00:00+00:00",
                      resource_type="solved_paper", show_in_recent=False),
            _resource(5, "Draft Calculus Paper", subject="Calculus", subject_id="sub-calc",
                      created_at="2024-05-01T00:00:00+00:00", is_published=False),
            _resource(6, "External Paper", file_path="https://cdn.example.org/external.pdf",
                      created_at="2023-12-01T00:00:00+00:00", download_count=None),
        ],
        "degree_comments": [
            {"id": "c1", "degree_id": "deg-bsc", "user_name": "Asha", "comment_text": "Great papers",
             "is_approved": True, "created_at": "2024-01-10T00:00:00+00:00"},
            {"id": "c2", "degree_id": "deg-bsc", "user_name": "Ravi", "comment_text": "Need more notes",
             "is_approved": True, "created_at": "2024-02-10T00:00:00+00:00"},
            {"id": "c3", "degree_id": "deg-bsc", "user_name": "Spam", "comment_text": "buy now",
             "is_approved": False, "created_at": "2024-03-10T00:00:00+00:00"},
            {"id": "c4", "degree_id": "deg-ba", "user_name": "Meera", "comment_text": "Helpful",
             "is_approved": True, "created_at": "2024-03-10T00:00:00+00:00"},
        ],
    }


@pytest.fixture
def backend(tables):
    return InMemoryBackend(tables)


@pytest.fixture
def client(backend):
    return CatalogClient(backend)


@pytest.fixture
def fake_timers():
    FakeTimer.created.clear()
    yield FakeTimer.created
    FakeTimer.created.clear()


@pytest.fixture
def search(client, fake_timers):
    from catalog.search import SearchEngine

    return SearchEngine(client, timer_factory=FakeTimer)
