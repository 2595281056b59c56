"""
Runtime configuration and logging setup.

Values are read from the environment (a local .env file is loaded first):

    SUPABASE_URL          project URL, e.g. https://xyz.supabase.co
    SUPABASE_ANON_KEY     public anon key sent as apikey + bearer token
    STORAGE_BUCKET        bucket holding uploaded papers (question-papers)
    RESOURCE_TABLE        relation holding resources (Exam-prep)
    REQUEST_TIMEOUT       seconds per backend request (15)
    CATALOG_API_URL       base URL the frontend links downloads to

Logs go to stdout and logs/app.log (rotating, 5 MB max, 3 backups).
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Backend
# ---------------------------------------------------------------------------

SUPABASE_URL      = os.getenv("SUPABASE_URL", "").rstrip("/")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
STORAGE_BUCKET    = os.getenv("STORAGE_BUCKET", "question-papers")
RESOURCE_TABLE    = os.getenv("RESOURCE_TABLE", "Exam-prep")
REQUEST_TIMEOUT   = float(os.getenv("REQUEST_TIMEOUT", "15"))

# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

RECENT_LIMIT            = 6
SEARCH_LIMIT            = 50
SEARCH_DEBOUNCE_SECONDS = 0.3

# ---------------------------------------------------------------------------
# Frontend / logging
# ---------------------------------------------------------------------------

API_URL  = os.getenv("CATALOG_API_URL", "http://localhost:8000").rstrip("/")
LOG_DIR  = Path(__file__).parent.parent / "logs"
LOG_FILE = LOG_DIR / "app.log"

_logging_ready = False


def setup_logging() -> None:
    """Attach stdout + rotating file handlers to the root logger (once)."""
    global _logging_ready
    if _logging_ready:
        return

    LOG_DIR.mkdir(exist_ok=True)
    fmt = logging.Formatter("%(asctime)s  %(levelname)s  %(name)s  %(message)s")

    stream = logging.StreamHandler(sys.stdout)
    stream.setFormatter(fmt)

    # Rotate at 5 MB, keep 3 backups
    rotating = logging.handlers.RotatingFileHandler(
        LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    rotating.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    root.addHandler(stream)
    root.addHandler(rotating)
    _logging_ready = True
