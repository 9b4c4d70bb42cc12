"""Observable filtered view of entries and the summary derived from it."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import TYPE_CHECKING

from .models import KnowledgeItem
from .query import EntryFilter, filter_entries

if TYPE_CHECKING:
    from .ai import Assistant

Listener = Callable[[list[KnowledgeItem]], None]

NO_ENTRIES_MESSAGE = "No entries available to summarize."


class FilteredEntries:
    """Holds an entry collection plus filter inputs and the derived result.

    Subscribers are called with the new result whenever the visible
    sequence of entry ids changes.
    """

    def __init__(
        self,
        entries: Sequence[KnowledgeItem] = (),
        entry_filter: EntryFilter | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._entries = list(entries)
        self._filter = entry_filter or EntryFilter()
        self._clock = clock
        self._listeners: list[Listener] = []
        self._result = self._compute()

    @property
    def entries(self) -> list[KnowledgeItem]:
        return list(self._entries)

    @property
    def filter(self) -> EntryFilter:
        return self._filter

    @property
    def result(self) -> list[KnowledgeItem]:
        return list(self._result)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_entries(self, entries: Sequence[KnowledgeItem]) -> list[KnowledgeItem]:
        self._entries = list(entries)
        return self._refresh()

    def set_filter(self, entry_filter: EntryFilter) -> list[KnowledgeItem]:
        self._filter = entry_filter
        return self._refresh()

    def _compute(self) -> list[KnowledgeItem]:
        now = self._clock() if self._clock else None
        return filter_entries(self._entries, self._filter, now)

    def _refresh(self) -> list[KnowledgeItem]:
        previous = [e.id for e in self._result]
        self._result = self._compute()
        if [e.id for e in self._result] != previous:
            for listener in list(self._listeners):
                listener(self.result)
        return self.result


class DerivedSummary:
    """AI overview of the entries currently visible in a view.

    The text describes one snapshot of the view and is cleared on every
    change of the view's result.
    """

    def __init__(self) -> None:
        self.text = ""
        self._view: FilteredEntries | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._generation = 0

    def attach(self, view: FilteredEntries) -> None:
        self.detach()
        self._view = view
        self._unsubscribe = view.subscribe(self._on_change)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = None
        self._view = None
        self.reset()

    def reset(self) -> None:
        self.text = ""
        self._generation += 1

    def _on_change(self, _result: list[KnowledgeItem]) -> None:
        self.reset()

    async def refresh(self, assistant: Assistant) -> str:
        """Summarize the attached view's titles.

        A result that arrives after the view changed is discarded.
        """
        if self._view is None:
            raise RuntimeError("DerivedSummary is not attached to a view")
        titles = [e.title for e in self._view.result]
        if not titles:
            self.text = NO_ENTRIES_MESSAGE
            return self.text

        generation = self._generation
        summary = await assistant.summarize(titles)
        if generation == self._generation:
            self.text = summary
        return self.text
