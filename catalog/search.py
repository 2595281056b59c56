"""
Home-page search and filter.

Two independent dimensions:

    free text   server-side. Each set_term() (re)starts a debounce timer;
                only the timer firing issues the fetch, so a burst of
                keystrokes costs one request. A blank term falls back to the
                featured "recent" listing, never to "everything".
    type        client-side. set_resource_type() only changes which of the
                already-fetched rows are visible; it never re-fetches.

A resource is visible iff it came back for the current term AND the type
filter is "all" or equals its resource_type.

Fetches can overlap (a slow request followed by a fast one). Each dispatch
gets a generation number and only the newest generation may write results.
"""

import logging
import threading
from collections.abc import Callable, Iterable

from catalog import config
from catalog.client import CatalogClient
from catalog.models import Resource, ResourceType

log = logging.getLogger(__name__)

TimerFactory = Callable[[float, Callable[[], None]], threading.Timer]


def filter_by_type(
    resources: Iterable[Resource], resource_type: ResourceType | str
) -> list[Resource]:
    wanted = ResourceType(resource_type)
    if wanted is ResourceType.ALL:
        return list(resources)
    return [r for r in resources if r.resource_type == wanted.value]


class SearchEngine:
    def __init__(
        self,
        client: CatalogClient,
        debounce: float = config.SEARCH_DEBOUNCE_SECONDS,
        timer_factory: TimerFactory = threading.Timer,
    ):
        self.client        = client
        self.debounce      = debounce
        self.timer_factory = timer_factory

        self.term: str = ""
        self.resource_type = ResourceType.ALL
        self.resources: list[Resource] = []

        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._generation = 0

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def set_term(self, text: str) -> None:
        """Record a keystroke; the fetch runs once the input has been idle."""
        with self._lock:
            self.term = text
            self._cancel_timer()
            self._generation += 1
            generation = self._generation
            timer = self.timer_factory(self.debounce, lambda: self._run(generation))
            timer.daemon = True
            self._timer = timer
        timer.start()

    def refresh(self) -> None:
        """Re-run the current term now, dropping any pending debounce."""
        with self._lock:
            self._cancel_timer()
            self._generation += 1
            generation = self._generation
        self._run(generation)

    def cancel(self) -> None:
        """Drop a pending keystroke without fetching (leaving the home page)."""
        with self._lock:
            self._cancel_timer()
            self._generation += 1

    def set_resource_type(self, resource_type: ResourceType | str) -> None:
        self.resource_type = ResourceType(resource_type)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    @property
    def searching(self) -> bool:
        return bool(self.term.strip())

    @property
    def pending(self) -> bool:
        """True from a keystroke until the debounced fetch has landed."""
        return self._timer is not None

    @property
    def visible(self) -> list[Resource]:
        return filter_by_type(self.resources, self.resource_type)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _run(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            term = self.term

        results = self.client.list_recent_resources(term)

        with self._lock:
            if generation != self._generation:
                log.debug("Dropping stale results for %r", term)
                return
            self.resources = results
            self._timer = None
        log.info("search=%r  hits=%d", term.strip(), len(results))
