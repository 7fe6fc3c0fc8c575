"""
In-process cache of fetched views (match, events, teams, other leg).

Keys follow ``"<view>:<match_id>"``. Mutations invalidate by key or glob
pattern, the same way cache keys are scanned and dropped on the server side.
Concurrent misses for one key share a single fetch, and a fetch that was in
flight when its key got invalidated is not stored.
"""

import asyncio
import fnmatch
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


def match_key(match_id: int) -> str:
    return f"match:{match_id}"


def goals_key(match_id: int) -> str:
    return f"goals:{match_id}"


def cards_key(match_id: int) -> str:
    return f"cards:{match_id}"


def substitutions_key(match_id: int) -> str:
    return f"substitutions:{match_id}"


def other_leg_key(match_id: int) -> str:
    return f"other_leg:{match_id}"


def team_key(team_id: int) -> str:
    return f"team:{team_id}"


MATCHES_KEY = "matches"


class QueryCache:
    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._pending: dict[str, asyncio.Future] = {}
        self._generations: dict[str, int] = {}

    def peek(self, key: str) -> Any | None:
        """Cached value without fetching."""
        return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._values

    async def get_or_fetch(self, key: str, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        if key in self._values:
            return self._values[key]
        return await self.fetch(key, fetcher)

    async def fetch(self, key: str, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        """Fetch and store, bypassing any cached value."""
        generation = self._generations.get(key, 0)
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(fetcher())
            self._pending[key] = task
            task.add_done_callback(lambda done, k=key: self._release(k, done))
        value = await asyncio.shield(task)
        if self._generations.get(key, 0) == generation:
            self._values[key] = value
        return value

    def _release(self, key: str, task: asyncio.Future) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]

    def invalidate(self, *patterns: str) -> int:
        """Drop cached values whose key matches any of the patterns."""
        known = set(self._values) | set(self._pending)
        keys = [k for k in known if any(fnmatch.fnmatchcase(k, p) for p in patterns)]
        for key in keys:
            self._values.pop(key, None)
            self._pending.pop(key, None)
            self._generations[key] = self._generations.get(key, 0) + 1
        if keys:
            logger.debug("Invalidated %d cached views matching %s", len(keys), patterns)
        return len(keys)

    def clear(self) -> None:
        self.invalidate("*")
