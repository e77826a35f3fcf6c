"""
session.py — Session-scoped runtime context
===========================================
One ``RuntimeSession`` exists per page/session.  It runs discovery once,
wraps the result in a ``DataModelBridge``, owns the local store, the clock
and the settings, and is passed to every component constructor.  Nothing
is kept in module globals, so independent sessions (and tests) never
share state.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Optional

from schorm_runtime.bridge import DataModelBridge
from schorm_runtime.config import Settings, get_settings
from schorm_runtime.discovery import ContextSource, DiscoveryResult, discover
from schorm_runtime.storage import LocalStore, StorageCategory, storage_key, store_from_settings

if TYPE_CHECKING:
    from schorm_runtime.assessment import QuizAttempt
    from schorm_runtime.media import MediaCompletionTracker
    from schorm_runtime.quiz_model import QuizSpec

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RuntimeSession:
    """Everything one page needs to talk to the host or fall back locally."""

    def __init__(
        self,
        discovery: DiscoveryResult,
        settings: Optional[Settings] = None,
        store: Optional[LocalStore] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.discovery = discovery
        handle = None
        if discovery.found and not self.settings.runtime.force_preview_mode:
            handle = discovery.handle
        self.bridge = DataModelBridge(handle)
        self.store = store if store is not None else store_from_settings(self.settings)
        self.clock: Clock = clock or utc_now
        self._media: Optional["MediaCompletionTracker"] = None

    @property
    def is_preview_mode(self) -> bool:
        """True when no real tracking API is in use."""
        return not self.bridge.has_handle

    @property
    def namespace(self) -> str:
        return self.settings.runtime.namespace

    def key(self, category: StorageCategory, item_id: str) -> str:
        return storage_key(self.namespace, category, item_id)

    # ── Lifecycle ────────────────────────────────────────────────────────────

    def initialize(self) -> bool:
        ok = self.bridge.initialize()
        if self.is_preview_mode:
            logger.info("schorm: running in preview mode (no tracking API)")
        return ok

    def terminate(self) -> bool:
        return self.bridge.terminate()

    # ── Components ───────────────────────────────────────────────────────────

    @property
    def media(self) -> "MediaCompletionTracker":
        """The page's completion tracker, with any preview snapshot merged in."""
        if self._media is None:
            from schorm_runtime.media import MediaCompletionTracker
            self._media = MediaCompletionTracker(self)
            self._media.load_persisted()
        return self._media

    def quiz(self, spec: "QuizSpec") -> "QuizAttempt":
        """A fresh, not-yet-submitted attempt for *spec*."""
        from schorm_runtime.assessment import QuizAttempt
        return QuizAttempt(self, spec)


def open_session(
    contexts: ContextSource = (),
    settings: Optional[Settings] = None,
    store: Optional[LocalStore] = None,
    clock: Optional[Clock] = None,
    initialize: bool = True,
) -> RuntimeSession:
    """Discover the tracking API once and return an (initialised) session."""
    settings = settings or get_settings()
    result = discover(contexts, max_depth=settings.runtime.discovery_max_depth)
    session = RuntimeSession(result, settings=settings, store=store, clock=clock)
    if initialize:
        session.initialize()
    return session
