"""
Serializes state-changing requests for a match.

Every mutation goes through ``MutationCoordinator.run``:

1. Pre-flight lock check against the last known match snapshot. A match
   already known to be finished fails with ``MatchLocked`` before anything
   is sent.
2. In-flight dedup: while a mutation with the same logical key is pending,
   further requests with that key await the pending one and share its
   outcome instead of being sent again. The registry of pending mutations
   can be passed in, so coordinators built per HTTP request share one.
3. The match is re-read right before acting and the lock re-checked, so a
   match that finished in the meantime is never mutated.
4. Cached views are invalidated only after the collaborator confirmed the
   change. Failures propagate unchanged and leave the cache untouched.

Dispatched operations are shielded: a caller that stops waiting does not
cancel the request already sent.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable, Iterable
from typing import Any, TypeVar

from matchdesk.exceptions import MatchLocked
from matchdesk.repositories.base import MatchRepository
from matchdesk.schemas.match import MatchResponse
from matchdesk.services.match_state import is_locked
from matchdesk.services.query_cache import QueryCache, match_key

logger = logging.getLogger(__name__)

T = TypeVar("T")

# (match_id, logical key) -> pending mutation; may be shared by several coordinators
InFlight = dict[tuple[Hashable, ...], asyncio.Future]


class MutationCoordinator:
    def __init__(
        self,
        matches: MatchRepository,
        cache: QueryCache | None = None,
        in_flight: InFlight | None = None,
    ):
        self.matches = matches
        self.cache = cache or QueryCache()
        self._in_flight: InFlight = {} if in_flight is None else in_flight

    def is_pending(self, match_id: int, key: Hashable) -> bool:
        return (match_id, key) in self._in_flight

    def check_cached_lock(self, match_id: int) -> None:
        """Fail fast when the cached snapshot already says finished."""
        cached: MatchResponse | None = self.cache.peek(match_key(match_id))
        if cached is not None and is_locked(cached):
            logger.warning("Rejected mutation on locked match %s (cached)", match_id)
            raise MatchLocked(match_id)

    async def run(
        self,
        match_id: int,
        key: Hashable,
        operation: Callable[[MatchResponse], Awaitable[T]],
        *,
        invalidate: Iterable[str] = (),
    ) -> T:
        """
        Run ``operation(fresh_match)`` under the lock and dedup rules.

        Args:
            match_id: Match the mutation belongs to
            key: Logical mutation key, e.g. "start" or ("goal:delete", 12)
            operation: Coroutine factory receiving the freshly read match
            invalidate: Cache keys / glob patterns to drop on success
        """
        self.check_cached_lock(match_id)

        flight_key = (match_id, key)
        pending = self._in_flight.get(flight_key)
        if pending is not None:
            logger.debug("Coalesced mutation %s for match %s into pending request", key, match_id)
            return await asyncio.shield(pending)

        task = asyncio.ensure_future(self._execute(match_id, key, operation, tuple(invalidate)))
        self._in_flight[flight_key] = task
        task.add_done_callback(lambda done: self._release(flight_key, done))
        return await asyncio.shield(task)

    def _release(self, flight_key: tuple[Hashable, ...], task: asyncio.Future) -> None:
        if self._in_flight.get(flight_key) is task:
            del self._in_flight[flight_key]
        if not task.cancelled():
            # Mark retrieved; the awaiting callers (if any) re-raise it
            task.exception()

    async def _execute(
        self,
        match_id: int,
        key: Hashable,
        operation: Callable[[MatchResponse], Awaitable[Any]],
        invalidate: tuple[str, ...],
    ) -> Any:
        match = await self.matches.get(match_id)
        self.cache.set(match_key(match_id), match)
        if is_locked(match):
            logger.warning("Rejected mutation %s on locked match %s", key, match_id)
            raise MatchLocked(match_id)

        result = await operation(match)

        if invalidate:
            self.cache.invalidate(*invalidate)
        return result
