"""Abstract repository for InlineLoad aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from fabric_ledger.domain.model.inline import InlineLoad


class InlineRepository(ABC):

    @abstractmethod
    def get_by_load_id(self, load_id: str) -> InlineLoad | None:
        """Return an inline load by its load ID, or None."""

    @abstractmethod
    def list_all(self) -> list[InlineLoad]:
        """Return every inline load."""

    @abstractmethod
    def save(self, load: InlineLoad) -> None:
        """Persist a new or updated inline load."""
