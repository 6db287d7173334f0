# portal/services/aggregator.py
"""Fetch-with-fallback and concurrent fan-out for upstream APIs.

Each upstream call carries its own HTTP timeout (there is no global
deadline). A call that fails or times out is replaced by its fallback value
exactly once; nothing is retried and nothing is raised to the route.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

MAX_WORKERS = 8


@dataclass
class SourceResult:
    value: Any
    is_live: bool
    error: str | None = None


def _resolve_fallback(fallback):
    return fallback() if callable(fallback) else fallback


def fetch_with_fallback(name: str, fetch: Callable[[], Any], fallback=None) -> SourceResult:
    """Run ``fetch()``; on any exception or a ``None`` result use ``fallback``.

    ``fallback`` may be a value or a zero-argument callable.
    """
    try:
        value = fetch()
    except Exception as e:  # upstream failures never propagate
        logger.warning("Source %s failed, using fallback: %s", name, e)
        return SourceResult(_resolve_fallback(fallback), is_live=False, error=str(e) or type(e).__name__)

    if value is None:
        logger.info("Source %s returned no data, using fallback", name)
        return SourceResult(_resolve_fallback(fallback), is_live=False, error="no data")

    return SourceResult(value, is_live=True)


def gather(sources: dict) -> dict:
    """Run ``{name: (fetch, fallback)}`` concurrently and join them.

    Returns ``{name: SourceResult}``; one failing source never affects the
    others.
    """
    if not sources:
        return {}

    workers = min(MAX_WORKERS, len(sources))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="upstream") as executor:
        futures = {
            name: executor.submit(fetch_with_fallback, name, fetch, fallback)
            for name, (fetch, fallback) in sources.items()
        }
        return {name: future.result() for name, future in futures.items()}
