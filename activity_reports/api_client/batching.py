"""Batch fetch shapes built on :class:`ResilientClient`.

Three traversals are supported, all strictly sequential:

* ``fetch_flat``: a single page of the most recent items; no further pages.
* ``fetch_id_batches``: one lookup per chunk of ids, capped at the provider's
  documented batch size.
* ``fetch_fan_out``: one secondary lookup per parent record for a capped
  prefix of the parents.

Batch and fan-out calls record a :class:`FetchOutcome` per chunk or parent
instead of raising; callers keep whatever succeeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from ..errors import ApiError
from .resources import ResilientClient

LOGGER = logging.getLogger(__name__)

__all__ = [
    "FetchOutcome",
    "chunked",
    "fetch_fan_out",
    "fetch_flat",
    "fetch_id_batches",
    "successful",
]


@dataclass(frozen=True)
class FetchOutcome:
    """Result or skip for one batch member."""

    key: Any
    value: Any = None
    error: Optional[ApiError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def chunked(items: Sequence[Any], size: int) -> Iterator[List[Any]]:
    if size < 1:
        raise ValueError("size must be >= 1")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


def successful(outcomes: Iterable[FetchOutcome]) -> List[Any]:
    return [outcome.value for outcome in outcomes if outcome.ok]


def fetch_flat(
    client: ResilientClient,
    url: str,
    *,
    page_size: int,
    page_param: str = "per_page",
    params: Optional[Dict[str, Any]] = None,
    context: str = "flat fetch",
) -> Any:
    """Fetch one page of ``page_size`` items. Errors propagate."""

    query = dict(params or {})
    query[page_param] = page_size
    return client.call(url, params=query, context=context)


def fetch_id_batches(
    client: ResilientClient,
    url: str,
    ids: Sequence[str],
    *,
    batch_size: int,
    max_batch_size: int,
    id_param: str = "ids",
    context: str = "batched lookup",
) -> List[FetchOutcome]:
    """Look up ``ids`` in comma-joined chunks; failed chunks are skipped."""

    if batch_size < 1 or batch_size > max_batch_size:
        raise ValueError(
            f"batch_size must be between 1 and {max_batch_size}, got {batch_size}"
        )
    outcomes: List[FetchOutcome] = []
    chunks = list(chunked(ids, batch_size))
    for index, chunk in enumerate(chunks, start=1):
        label = f"{context} batch {index}/{len(chunks)}"
        try:
            data = client.call(url, params={id_param: ",".join(chunk)}, context=label)
        except ApiError as exc:
            LOGGER.warning(
                "Skipping %s (%d ids) status=%s: %s",
                label,
                len(chunk),
                exc.status,
                exc,
            )
            outcomes.append(FetchOutcome(key=tuple(chunk), error=exc))
            continue
        outcomes.append(FetchOutcome(key=tuple(chunk), value=data))
    failed = sum(1 for o in outcomes if not o.ok)
    if failed:
        LOGGER.info("%s: %d/%d batches skipped", context, failed, len(outcomes))
    return outcomes


def fetch_fan_out(
    client: ResilientClient,
    parents: Sequence[Any],
    url_for: Callable[[Any], str],
    *,
    limit: int,
    key_for: Callable[[Any], Any] = lambda parent: parent,
    context: str = "per-item lookup",
) -> List[FetchOutcome]:
    """One call per parent for the first ``limit`` parents; failures skipped."""

    outcomes: List[FetchOutcome] = []
    for parent in list(parents)[: max(limit, 0)]:
        key = key_for(parent)
        label = f"{context} {key}"
        try:
            data = client.call(url_for(parent), context=label)
        except ApiError as exc:
            LOGGER.warning("Skipping %s status=%s: %s", label, exc.status, exc)
            outcomes.append(FetchOutcome(key=key, error=exc))
            continue
        outcomes.append(FetchOutcome(key=key, value=data))
    return outcomes
