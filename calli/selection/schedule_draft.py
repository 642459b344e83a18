"""
Schedule window draft: the editable list of windows behind "Add Schedule".

The draft always holds at least one window. Edits touch only the targeted
row. At submission time incomplete rows (missing start or end) are dropped
silently rather than rejected one by one.

Usage:
    draft = ScheduleDraft()
    draft.update_window(0, start="08:00", end="12:00")
    draft.add_window()
    draft.update_window(1, start="12:00", end="12:30", note="break")
    windows = draft.complete_windows()
"""

import logging
from typing import Any, Optional, Union

from calli.config import settings
from calli.schemas.records import ScheduleWindow, WindowNote

logger = logging.getLogger(__name__)

MIN_WINDOWS = 1


class ScheduleDraft:
    """Ordered, never-empty list of schedule windows being authored."""

    def __init__(self, default_note: Optional[Union[WindowNote, str]] = None) -> None:
        self._default_note = WindowNote(default_note or settings.booking.default_window_note)
        self._windows: list[ScheduleWindow] = [self._blank()]

    def _blank(self) -> ScheduleWindow:
        return ScheduleWindow(start="", end="", note=self._default_note)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._windows):
            raise ValueError(f"Unknown window: {index}")

    @property
    def windows(self) -> list[ScheduleWindow]:
        return list(self._windows)

    def __len__(self) -> int:
        return len(self._windows)

    def add_window(self) -> int:
        """Append a blank window and return its index."""
        self._windows.append(self._blank())
        logger.debug("Schedule window added (%d total)", len(self._windows))
        return len(self._windows) - 1

    def remove_window(self, index: int) -> bool:
        """Remove a window. Returns False, changing nothing, if it is the last one."""
        if len(self._windows) <= MIN_WINDOWS:
            logger.debug("Refusing to remove the only schedule window")
            return False
        self._check_index(index)
        del self._windows[index]
        return True

    def update_window(
        self,
        index: int,
        start: Optional[str] = None,
        end: Optional[str] = None,
        note: Optional[Union[WindowNote, str]] = None,
    ) -> ScheduleWindow:
        """Replace fields of one window, leaving every other window untouched."""
        self._check_index(index)
        changes: dict[str, Any] = {}
        if start is not None:
            changes["start"] = start
        if end is not None:
            changes["end"] = end
        if note is not None:
            changes["note"] = WindowNote(note)
        updated = self._windows[index].model_copy(update=changes)
        self._windows[index] = updated
        return updated

    def complete_windows(self) -> list[ScheduleWindow]:
        """Windows with both start and end filled, in draft order."""
        return [w for w in self._windows if w.is_complete()]

    def reset(self) -> None:
        """Return to the initial single blank window."""
        self._windows = [self._blank()]

    def get_stats(self) -> dict[str, int]:
        complete = len(self.complete_windows())
        return {
            "total": len(self._windows),
            "complete": complete,
            "dropped": len(self._windows) - complete,
        }
