"""
Debounced, cancellable address autocomplete.

Every keystroke cancels the pending debounce cycle and starts a new one; a cycle
only renders its suggestions if no newer keystroke or dismiss happened since it
began. Keyboard navigation is plain state over the rendered list.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

from walkreach.domain.models import Suggestion

logger = logging.getLogger(__name__)


class Suggester(Protocol):
    async def suggest(self, query: str, max_results: int | None = None) -> list[Suggestion]: ...


class AutocompleteController:
    """Suggestion dropdown state for one address input."""

    def __init__(
        self,
        suggester: Suggester,
        *,
        min_chars: int = 3,
        debounce_seconds: float = 0.3,
        max_results: int = 5,
        on_change: Callable[[list[Suggestion]], None] | None = None,
        on_select: Callable[[str], None] | None = None,
    ):
        self._suggester = suggester
        self._min_chars = int(min_chars)
        self._debounce_seconds = float(debounce_seconds)
        self._max_results = int(max_results)
        self._on_change = on_change
        self._on_select = on_select

        self._generation = 0
        self._pending: asyncio.Task[None] | None = None
        self._suggestions: list[Suggestion] = []
        self._active_index = -1
        self._visible = False

    @property
    def suggestions(self) -> list[Suggestion]:
        return list(self._suggestions)

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def active_index(self) -> int:
        return self._active_index

    @property
    def active_suggestion(self) -> Suggestion | None:
        if 0 <= self._active_index < len(self._suggestions):
            return self._suggestions[self._active_index]
        return None

    def _supersede(self) -> int:
        """Invalidate the pending cycle (timer or in-flight request)."""
        self._generation += 1
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
        return self._generation

    def _render(self, suggestions: list[Suggestion]) -> None:
        self._suggestions = list(suggestions)
        self._active_index = -1
        self._visible = bool(self._suggestions)
        if self._on_change is not None:
            self._on_change(self.suggestions)

    def on_input(self, text: str) -> asyncio.Task[None] | None:
        """Handle an input change; returns the scheduled debounce task, if any.

        Must be called from a running event loop.
        """
        generation = self._supersede()
        query = (text or "").strip()
        if len(query) < self._min_chars:
            self._render([])
            return None
        self._pending = asyncio.create_task(self._debounced_fetch(generation, query))
        return self._pending

    async def _debounced_fetch(self, generation: int, query: str) -> None:
        await asyncio.sleep(self._debounce_seconds)
        if generation != self._generation:
            return
        try:
            suggestions = await self._suggester.suggest(query, self._max_results)
        except Exception:
            logger.debug("Suggestion fetch failed; showing none", exc_info=True)
            suggestions = []
        if generation != self._generation:
            logger.debug("Discarding stale suggestions for cycle %d", generation)
            return
        self._render(suggestions)

    def move_next(self) -> int:
        """Highlight the next suggestion (clamped to the last one)."""
        if not self._visible or not self._suggestions:
            return self._active_index
        self._active_index = min(self._active_index + 1, len(self._suggestions) - 1)
        return self._active_index

    def move_previous(self) -> int:
        """Highlight the previous suggestion (clamped to the first one)."""
        if not self._visible or not self._suggestions:
            return self._active_index
        self._active_index = max(self._active_index - 1, 0)
        return self._active_index

    def select(self, index: int) -> str:
        """Pick visible suggestion `index`: hide the list and return (and emit) its label."""
        if not self._visible or not 0 <= index < len(self._suggestions):
            raise IndexError(f"no visible suggestion at index {index}")
        label = self._suggestions[index].label
        self._supersede()
        self._render([])
        if self._on_select is not None:
            self._on_select(label)
        return label

    def select_active(self) -> str | None:
        """Select the highlighted suggestion; None if nothing is highlighted."""
        if not self._visible or self.active_suggestion is None:
            return None
        return self.select(self._active_index)

    def dismiss(self) -> None:
        """Hide the list and drop any pending cycle (Escape, blur, form submit)."""
        self._supersede()
        if self._visible:
            self._render([])
        self._active_index = -1

    blur = dismiss

    def close(self) -> None:
        """Cancel pending work; the controller stays usable."""
        self._supersede()
