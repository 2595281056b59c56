"""
Resource downloads.

download_resource() runs the three steps in order:

    1. resolve the stored path to a URL (absolute http(s) URLs pass through,
       bucket paths go through the storage public-URL function)
    2. bump the resource's download counter (best-effort: a failed RPC is
       logged by the client and the download still happens)
    3. hand the URL and a filename to the trigger, which performs the actual
       browser-side download (a redirect in the API, a link in the UI)
"""

import re
from collections.abc import Callable
from pathlib import PurePosixPath
from typing import TypeVar
from urllib.parse import urlparse

from catalog.client import CatalogClient

T = TypeVar("T")


class DownloadError(ValueError):
    pass


def suggested_filename(title: str, file_path: str) -> str:
    """Title made filesystem-safe, with the stored file's extension appended."""
    stem = re.sub(r"[^\w\-. ]+", "", title).strip() or "resource"
    suffix = PurePosixPath(urlparse(file_path).path).suffix
    if suffix and not stem.lower().endswith(suffix.lower()):
        return f"{stem}{suffix}"
    return stem


def download_resource(
    client: CatalogClient,
    resource_id: int,
    file_path: str | None,
    title: str | None,
    trigger: Callable[[str, str], T],
) -> T:
    if not file_path:
        raise DownloadError(f"Resource {resource_id} has no file attached")

    filename = suggested_filename(title or "", file_path)
    url = client.resolve_download_url(file_path, download_as=filename)
    client.increment_download_count(resource_id)
    return trigger(url, filename)
