"""Application service: Add Inline Load use case."""

from __future__ import annotations

from fabric_ledger.application.dto import InlineLoadDTO, inline_to_dto
from fabric_ledger.domain.exceptions import EntityNotFoundError, ValidationError
from fabric_ledger.domain.model.inline import ColorBundle, InlineLoad
from fabric_ledger.domain.repository.cutting_repository import CuttingRepository
from fabric_ledger.domain.repository.inline_repository import InlineRepository


class AddInlineLoadHandler:

    def __init__(self, inline_repo: InlineRepository, cutting_repo: CuttingRepository) -> None:
        self._inline_repo = inline_repo
        self._cutting_repo = cutting_repo

    def handle(
        self,
        load_id: str,
        lot_no: str,
        size: str,
        colors: dict[str, tuple[int, int]],
    ) -> InlineLoadDTO:
        """Put cut pieces of one size on the line.

        ``colors`` maps color -> (quantity, bundle count).
        """
        batch = self._cutting_repo.get_by_lot_no(lot_no)
        if batch is None:
            raise EntityNotFoundError(f"Cutting reference for lot {lot_no} not found")

        if self._inline_repo.get_by_load_id(load_id.strip()) is not None:
            raise ValidationError(f"An inline load with ID '{load_id}' already exists")

        bundles: dict[str, ColorBundle] = {}
        for color, (qty, bundle) in colors.items():
            try:
                bundles[color.strip()] = ColorBundle(quantity=int(qty), bundle=int(bundle))
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid quantity or bundle for color '{color}'")

        load = InlineLoad.create(load_id=load_id, batch=batch, size=size, colors=bundles)
        self._inline_repo.save(load)
        return inline_to_dto(load)
