import pytest

from catalog import config
from catalog.backend import BackendError
from catalog.models import Resource


class TestDrillDownQueries:
    """Scoped, sorted, active-only listings."""

    def test_universities_active_sorted_by_name(self, client):
        names = [u.name for u in client.list_universities()]
        assert names == ["Alpha University", "Beta University"]

    def test_degrees_without_university_include_global(self, client):
        names = [d.name for d in client.list_degrees()]
        assert names == ["BA English", "BCom", "BSc Mathematics", "Diploma in Data"]

    def test_degrees_scoped_to_university(self, client, backend):
        degrees = client.list_degrees("uni-a")
        assert [d.name for d in degrees] == ["BA English", "BSc Mathematics"]
        _, _, eq, _, order, _ = backend.selects()[-1]
        assert eq == {"is_active": True, "university_id": "uni-a"}
        assert order == "name"

    def test_semesters_ordered_by_number(self, client):
        semesters = client.list_semesters("deg-bsc")
        assert [s.semester_number for s in semesters] == [1, 2]

    def test_subjects_scoped_to_semester(self, client):
        assert [s.name for s in client.list_subjects("sem-1")] == ["Algebra", "Calculus"]

    def test_subject_resources_published_newest_first(self, client):
        resources = client.list_subject_resources("sub-calc")
        # Draft (id 5) is unpublished
        assert [r.id for r in resources] == [1, 4]


class TestRecentResources:
    """Featured listing vs. free-text search."""

    def test_recent_uses_featured_predicate_and_limit(self, client, backend):
        resources = client.list_recent_resources()
        assert all(r.show_in_recent for r in resources)
        assert 4 not in [r.id for r in resources]
        _, _, eq, match_any, order, limit = backend.selects()[-1]
        assert eq == {"is_published": True, "show_in_recent": True}
        assert match_any == {}
        assert limit == config.RECENT_LIMIT

    def test_blank_search_restores_recent(self, client, backend):
        client.list_recent_resources("   ")
        _, _, eq, match_any, _, limit = backend.selects()[-1]
        assert eq["show_in_recent"] is True
        assert not match_any
        assert limit == 6

    def test_search_matches_any_text_column(self, client, backend):
        resources = client.list_recent_resources("calculus")
        # title match (1) and description match (4, not featured); 5 is unpublished
        assert sorted(r.id for r in resources) == [1, 4]
        _, _, eq, match_any, _, limit = backend.selects()[-1]
        assert "show_in_recent" not in eq
        assert set(match_any) == {"title", "subject", "course", "description"}
        assert limit == config.SEARCH_LIMIT

    def test_search_is_case_insensitive(self, client):
        assert [r.title for r in client.list_recent_resources("PHYSICS")] == ["Physics Midterm"]

    def test_calculus_example(self, backend, client):
        backend.tables["Exam-prep"] = [
            {"id": 10, "title": "Calculus II Finals", "is_published": True, "show_in_recent": True,
             "created_at": "2024-01-01T00:00:00+00:00"},
            {"id": 11, "title": "Physics Midterm", "is_published": True, "show_in_recent": True,
             "created_at": "2024-01-02T00:00:00+00:00"},
        ]
        assert [r.title for r in client.list_recent_resources("calculus")] == ["Calculus II Finals"]


class TestFailSoft:
    """A failing backend yields empty lists, never exceptions."""

    @pytest.mark.parametrize(
        "call",
        [
            lambda c: c.list_universities(),
            lambda c: c.list_degrees(),
            lambda c: c.list_semesters("deg-bsc"),
            lambda c: c.list_subjects("sem-1"),
            lambda c: c.list_subject_resources("sub-calc"),
            lambda c: c.list_recent_resources("calc"),
            lambda c: c.list_comments("deg-bsc"),
        ],
    )
    def test_fetch_failure_returns_empty(self, client, backend, call):
        backend.fail = True
        assert call(client) == []

    def test_malformed_rows_return_empty(self, client, backend):
        backend.tables["universities"] = [{"id": "u1", "is_active": True}]  # no name/code
        assert client.list_universities() == []

    def test_get_resource_failure_raises(self, client, backend):
        backend.fail = True
        with pytest.raises(BackendError):
            client.get_resource(1)

    def test_get_resource_malformed_row_is_none(self, client, backend):
        backend.tables["Exam-prep"][0]["id"] = "not-a-number"
        assert client.get_resource("not-a-number") is None

    def test_fetch_failure_is_logged(self, client, backend, caplog):
        backend.fail = True
        client.list_universities()
        assert "Error fetching universities" in caplog.text


class TestWrites:
    def test_increment_download_count(self, client, backend):
        assert client.increment_download_count(1) is True
        assert ("rpc", "increment_download_count", {"resource_id": 1}) in backend.calls
        assert client.get_resource(1).download_count == 5

    def test_increment_failure_is_swallowed(self, client, backend):
        backend.fail_rpc = True
        assert client.increment_download_count(1) is False

    def test_null_download_count_reads_as_zero(self, client):
        assert client.get_resource(6).download_count == 0

    def test_unpublished_resource_not_found(self, client):
        assert client.get_resource(5) is None

    def test_resolve_relative_path(self, client):
        url = client.resolve_download_url("papers/1.pdf")
        assert url == "https://storage.test/question-papers/papers/1.pdf"

    def test_resolve_absolute_url_passthrough(self, client, backend):
        url = "https://cdn.example.org/external.pdf"
        assert client.resolve_download_url(url) == url
        assert not [c for c in backend.calls if c[0] == "public_url"]


def test_resource_type_label():
    r = Resource(id=1, resource_type="question_paper")
    assert r.type_label == "question paper"
