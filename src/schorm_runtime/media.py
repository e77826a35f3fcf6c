"""
media.py — Per-item completion tracking for audio / video blocks
================================================================
The page scans its tagged media blocks and registers their ids; each
block's "ended" signal calls ``mark_completed``.

  untracked ──register──▶ tracked (not completed) ──mark_completed──▶ completed

Rules
-----
  • register() is idempotent; ids already present keep their state.
  • mark_completed() is idempotent: the first call stamps ``completed_at``;
    later calls change nothing and return False.
  • Unknown ids are never an error (ignored / reported as not completed).
  • all_completed() is True when nothing is tracked.
  • get_state() returns a copy; callers cannot mutate the registry.
  • Preview mode: every transition writes the full registry to the local
    store (one key per item, ``<ns>:media:<id>``); load_persisted() merges
    it back before the first scan.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Iterable, Optional

from schorm_runtime.storage import StorageCategory

if TYPE_CHECKING:
    from schorm_runtime.session import RuntimeSession

logger = logging.getLogger(__name__)


@dataclass
class MediaCompletion:
    """Completion state of one media item."""
    completed:    bool = False
    completed_at: Optional[str] = None   # ISO-8601, UTC

    @classmethod
    def from_dict(cls, data: dict) -> "MediaCompletion":
        completed = data.get("completed") is True
        stamp = data.get("completed_at")
        return cls(completed=completed, completed_at=stamp if completed and isinstance(stamp, str) else None)


class MediaCompletionTracker:
    """Owns the completion registry for one page."""

    def __init__(self, session: "RuntimeSession") -> None:
        self._session = session
        self._completion_state: dict[str, MediaCompletion] = {}
        self._tracked_media_ids: list[str] = []

    # ── Registration ─────────────────────────────────────────────────────────

    def register(self, media_ids: Iterable[str]) -> list[str]:
        """Seed the registry; return the ids that were newly tracked."""
        added: list[str] = []
        for media_id in media_ids:
            if not media_id or not str(media_id).strip():
                logger.warning("Media element without an id skipped")
                continue
            media_id = str(media_id)
            if media_id not in self._completion_state:
                self._completion_state[media_id] = MediaCompletion()
            if media_id not in self._tracked_media_ids:
                self._tracked_media_ids.append(media_id)
                added.append(media_id)
        if self._session.is_preview_mode:
            logger.info("schorm: tracking %d media element(s)", len(self._tracked_media_ids))
            if added:
                self._persist_state()
        return added

    @property
    def tracked_ids(self) -> tuple[str, ...]:
        return tuple(self._tracked_media_ids)

    # ── Transitions ──────────────────────────────────────────────────────────

    def mark_completed(self, media_id: str) -> bool:
        """Complete *media_id* once.  True only on the first transition."""
        if media_id not in self._tracked_media_ids:
            logger.debug("mark_completed for untracked media %r ignored", media_id)
            return False
        entry = self._completion_state[media_id]
        # Idempotent: an already-completed item keeps its original stamp
        if entry.completed:
            return False

        entry.completed = True
        entry.completed_at = self._session.clock().isoformat()

        if self._session.is_preview_mode:
            logger.info("schorm: media completed mediaId=%s", media_id)
            self._persist_state()
            if self.all_completed():
                logger.info("schorm: all media completed")
        return True

    # ── Queries ──────────────────────────────────────────────────────────────

    def is_completed(self, media_id: str) -> bool:
        entry = self._completion_state.get(media_id)
        return bool(entry and entry.completed)

    def all_completed(self) -> bool:
        if not self._tracked_media_ids:
            return True
        return all(self.is_completed(m) for m in self._tracked_media_ids)

    def get_state(self) -> dict[str, MediaCompletion]:
        """Return a copy to prevent external modification."""
        return copy.deepcopy(self._completion_state)

    def completed_count(self) -> int:
        return sum(1 for m in self._tracked_media_ids if self.is_completed(m))

    # ── Preview persistence ──────────────────────────────────────────────────

    def _storage_key(self, media_id: str) -> str:
        return self._session.key(StorageCategory.MEDIA, media_id)

    def _persist_state(self) -> bool:
        """Write every registry entry; failures are logged, never raised."""
        if not self._session.is_preview_mode:
            return False
        ok = True
        for media_id, data in self.snapshot().items():
            if not self._session.store.save_json(self._storage_key(media_id), data):
                ok = False
        if not ok:
            logger.warning("schorm: Failed to persist media state")
        return ok

    def load_persisted(self) -> int:
        """Merge a stored snapshot into the registry; return entries merged."""
        if not self._session.is_preview_mode:
            return 0
        prefix = self._storage_key("")
        merged = 0
        for key, raw in self._session.store.items(prefix).items():
            media_id = key[len(prefix):]
            if not media_id:
                continue
            try:
                entry = MediaCompletion.from_dict(json.loads(raw))
            except (ValueError, AttributeError) as exc:
                logger.warning("schorm: Failed to load persisted media state for %s: %s", media_id, exc)
                continue
            current = self._completion_state.get(media_id)
            # Completion is one-way: never let a stored "not completed" undo a completion
            if current is None or (entry.completed and not current.completed):
                self._completion_state[media_id] = entry
                merged += 1
        return merged

    def snapshot(self) -> dict[str, dict]:
        """Plain-dict view (for debug output and serialisation)."""
        return {m: asdict(e) for m, e in self._completion_state.items()}

