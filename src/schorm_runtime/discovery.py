"""
discovery.py — Locate the host tracking API across nested contexts
==================================================================
Content pages usually run inside one or more frames of the host player.
The tracking API lives on one of the enclosing contexts, so the runtime
walks outward from the current context until it finds one exposing the
API object under a recognised name.

Recognised names (checked in this order in every context)
---------------------------------------------------------
  API_1484_11   current data-model generation (SCORM 2004)
  API           legacy data-model generation  (SCORM 1.2)

Walk rules
----------
  • The chain is supplied by the caller (an ordered iterable, nearest first,
    or a zero-arg callable returning one).  ``parent_chain()`` builds it from
    a window-like object graph.
  • At most ``max_depth`` hops beyond the current context are inspected
    (``DEFAULT_MAX_DEPTH`` = 7).
  • A context that raises on access ends the walk ("inaccessible").
  • A context seen twice ends the walk ("cycle").

Not finding the API is not an error: callers switch to preview mode.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 7


class ApiGeneration(str, Enum):
    CURRENT = "2004"
    LEGACY  = "1.2"


# Priority order matters: current generation first.
API_NAMES: tuple[tuple[str, ApiGeneration], ...] = (
    ("API_1484_11", ApiGeneration.CURRENT),
    ("API",         ApiGeneration.LEGACY),
)

ContextSource = Union[Iterable[Any], Callable[[], Iterable[Any]]]


@dataclass(frozen=True)
class DiscoveryResult:
    """Outcome of one discovery walk."""
    found:      bool
    handle:     Any = None
    api_name:   Optional[str] = None
    generation: Optional[ApiGeneration] = None
    depth:      Optional[int] = None     # hops from the current context
    reason:     str = ""                 # "found" | "exhausted" | "max_depth" | "inaccessible" | "cycle"

    @classmethod
    def not_found(cls, reason: str) -> "DiscoveryResult":
        return cls(found=False, reason=reason)


def _lookup(context: Any, name: str) -> Any:
    """Read *name* from a mapping or an attribute-bearing context."""
    if isinstance(context, Mapping):
        return context.get(name)
    return getattr(context, name, None)


def find_api_in_context(context: Any) -> Optional[tuple[str, ApiGeneration, Any]]:
    """Return (name, generation, handle) for the first API exposed by *context*."""
    for name, generation in API_NAMES:
        handle = _lookup(context, name)
        if handle is not None:
            return name, generation, handle
    return None


def discover(contexts: ContextSource, max_depth: int = DEFAULT_MAX_DEPTH) -> DiscoveryResult:
    """
    Walk *contexts* (nearest first) looking for the tracking API.

    Never raises; every failure mode is reported through ``DiscoveryResult.reason``.
    """
    try:
        chain = contexts() if callable(contexts) else contexts
        iterator = iter(chain)
    except Exception as exc:
        logger.warning("Context chain unavailable: %s", exc)
        return DiscoveryResult.not_found("inaccessible")

    seen: list[Any] = []
    depth = 0
    while True:
        if depth > max_depth:
            logger.info("Tracking API not found within %d hops", max_depth)
            return DiscoveryResult.not_found("max_depth")
        try:
            context = next(iterator)
        except StopIteration:
            logger.info("Tracking API not found; context chain exhausted after %d hop(s)", depth)
            return DiscoveryResult.not_found("exhausted")
        except Exception as exc:
            logger.info("Context at hop %d is inaccessible: %s", depth, exc)
            return DiscoveryResult.not_found("inaccessible")

        if any(context is s for s in seen):
            logger.debug("Context chain loops back at hop %d", depth)
            return DiscoveryResult.not_found("cycle")
        seen.append(context)

        try:
            match = find_api_in_context(context)
        except Exception as exc:
            logger.info("Context at hop %d is inaccessible: %s", depth, exc)
            return DiscoveryResult.not_found("inaccessible")

        if match is not None:
            name, generation, handle = match
            logger.info("Tracking API %s found at hop %d", name, depth)
            return DiscoveryResult(
                found=True,
                handle=handle,
                api_name=name,
                generation=generation,
                depth=depth,
                reason="found",
            )
        depth += 1


def parent_chain(start: Any, parent_attr: str = "parent") -> Iterator[Any]:
    """
    Yield *start* and then each enclosing context via ``parent_attr``.

    Stops when the parent is missing, ``None``, or the context itself
    (top-level windows are their own parent).
    """
    current = start
    while current is not None:
        yield current
        parent = getattr(current, parent_attr, None)
        if parent is None or parent is current:
            return
        current = parent
