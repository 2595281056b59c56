"""
FastAPI application — JSON surface over the exam-resource catalog.

Run directly:
    python app/app.py

Or as a module:
    uvicorn app.app:app --reload

Endpoints:
    GET  /universities
    GET  /degrees?university_id=...            (university_id optional)
    GET  /degrees/{degree_id}/semesters
    GET  /semesters/{semester_id}/subjects
    GET  /subjects/{subject_id}/resources
    GET  /resources/recent?q=...&type=...      (featured when q is blank)
    GET  /resources/{resource_id}/download     → 307 to the file
    GET  /degrees/{degree_id}/comments
    POST /degrees/{degree_id}/comments
        body:    {"user_name": "...", "user_email": "...", "comment_text": "..."}
        returns: 202 {"title": str, "description": str}

List endpoints never fail on a backend outage; they return []. The download
endpoint answers 503 when the resource lookup itself fails. Each request's
scope, hit count and wall-clock time are logged to stdout and logs/app.log.
"""

import asyncio
import logging
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

# Ensure project root is on sys.path when running as a script (python app/app.py)
sys.path.insert(0, str(Path(__file__).parent.parent))

from catalog.backend import BackendError, SupabaseBackend
from catalog.client import CatalogClient
from catalog.comments import (
    FAILED_MESSAGE,
    SUBMITTED_MESSAGE,
    SUBMITTED_TITLE,
    CommentForm,
    CommentValidationError,
)
from catalog.config import setup_logging
from catalog.downloads import DownloadError, download_resource
from catalog.models import Comment, Degree, Resource, ResourceType, Semester, Subject, University
from catalog.search import filter_by_type

setup_logging()
log = logging.getLogger("api")


# ---------------------------------------------------------------------------
# App + lifespan
# ---------------------------------------------------------------------------

_catalog: CatalogClient | None = None


@asynccontextmanager
async def lifespan(_: FastAPI):
    global _catalog

    log.info("Connecting catalog client…")
    _catalog = CatalogClient(SupabaseBackend())
    log.info("  Ready (bucket=%s, resources=%s).", _catalog.bucket, _catalog.resource_table)

    yield  # server runs here


app = FastAPI(title="ExamAce Vault", lifespan=lifespan)


def get_catalog() -> CatalogClient:
    if _catalog is None:
        raise HTTPException(status_code=503, detail="Catalog not initialised.")
    return _catalog


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class CommentRequest(BaseModel):
    user_name: str = ""
    user_email: str | None = None
    comment_text: str = ""


class NoticeResponse(BaseModel):
    title: str
    description: str


# ---------------------------------------------------------------------------
# Drill-down
# ---------------------------------------------------------------------------

def _timed(label: str, fetch):
    t0 = time.perf_counter()
    rows = fetch()
    log.info("%s  hits=%d  %.2fs", label, len(rows), time.perf_counter() - t0)
    return rows


@app.get("/universities", response_model=list[University])
def universities(catalog: CatalogClient = Depends(get_catalog)) -> list[University]:
    return _timed("universities", catalog.list_universities)


@app.get("/degrees", response_model=list[Degree])
def degrees(
    university_id: str | None = None,
    catalog: CatalogClient = Depends(get_catalog),
) -> list[Degree]:
    return _timed(
        f"degrees university={university_id!r}",
        lambda: catalog.list_degrees(university_id),
    )


@app.get("/degrees/{degree_id}/semesters", response_model=list[Semester])
def semesters(degree_id: str, catalog: CatalogClient = Depends(get_catalog)) -> list[Semester]:
    return _timed(f"semesters degree={degree_id!r}", lambda: catalog.list_semesters(degree_id))


@app.get("/semesters/{semester_id}/subjects", response_model=list[Subject])
def subjects(semester_id: str, catalog: CatalogClient = Depends(get_catalog)) -> list[Subject]:
    return _timed(f"subjects semester={semester_id!r}", lambda: catalog.list_subjects(semester_id))


@app.get("/subjects/{subject_id}/resources", response_model=list[Resource])
def subject_resources(subject_id: str, catalog: CatalogClient = Depends(get_catalog)) -> list[Resource]:
    return _timed(
        f"resources subject={subject_id!r}",
        lambda: catalog.list_subject_resources(subject_id),
    )


# ---------------------------------------------------------------------------
# Home search + downloads
# ---------------------------------------------------------------------------

@app.get("/resources/recent", response_model=list[Resource])
def recent_resources(
    q: str = "",
    resource_type: ResourceType = Query(ResourceType.ALL, alias="type"),
    catalog: CatalogClient = Depends(get_catalog),
) -> list[Resource]:
    rows = _timed(f"recent q={q.strip()!r}", lambda: catalog.list_recent_resources(q))
    return filter_by_type(rows, resource_type)


@app.get("/resources/{resource_id}/download")
def download(resource_id: int, catalog: CatalogClient = Depends(get_catalog)) -> RedirectResponse:
    try:
        resource = catalog.get_resource(resource_id)
    except BackendError as exc:
        log.error("download id=%d lookup failed: %s", resource_id, exc)
        raise HTTPException(status_code=503, detail="Catalog backend unavailable.") from exc
    if resource is None:
        raise HTTPException(status_code=404, detail="Resource not found.")

    try:
        response = download_resource(
            catalog,
            resource.id,
            resource.file_path,
            resource.title,
            trigger=lambda url, _filename: RedirectResponse(url, status_code=307),
        )
    except DownloadError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    log.info("download id=%d", resource.id)
    return response


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

@app.get("/degrees/{degree_id}/comments", response_model=list[Comment])
def comments(degree_id: str, catalog: CatalogClient = Depends(get_catalog)) -> list[Comment]:
    return _timed(f"comments degree={degree_id!r}", lambda: catalog.list_comments(degree_id))


@app.post("/degrees/{degree_id}/comments", response_model=NoticeResponse, status_code=202)
def post_comment(
    degree_id: str,
    req: CommentRequest,
    catalog: CatalogClient = Depends(get_catalog),
) -> NoticeResponse:
    form = CommentForm(
        user_name=req.user_name,
        user_email=req.user_email or "",
        comment_text=req.comment_text,
    )
    try:
        draft = form.to_draft(degree_id)
    except CommentValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        catalog.submit_comment(draft)
    except BackendError as exc:
        log.error("comment for degree=%r failed: %s", degree_id, exc)
        raise HTTPException(status_code=502, detail=FAILED_MESSAGE) from exc

    log.info("comment submitted for degree=%r (pending moderation)", degree_id)
    return NoticeResponse(title=SUBMITTED_TITLE, description=SUBMITTED_MESSAGE)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def _launch_server() -> None:
    config = uvicorn.Config(app, host="0.0.0.0", port=8000, reload=False)
    server = uvicorn.Server(config)

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        uvicorn.run(app, host="0.0.0.0", port=8000, reload=False)
        return

    log.warning(
        "Detected an existing asyncio event loop; serving with create_task() instead of asyncio.run()."
    )
    asyncio.create_task(server.serve())


if __name__ == "__main__":
    log.info("=== ExamAce Vault API — launching on http://0.0.0.0:8000 ===")
    _launch_server()
