# Alias Manager - A tool for creating and managing shell aliases.
# Copyright (C) 2025 Heston Hamilton
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Editing session tying the alias file, codec and staging store together."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from .aliases import AliasRecord, decode
from .config import Config
from .errors import PersistenceError
from .staging import Outcome, SortOrder, StagingStore, Status
from .storage import AliasFileGateway

logger = logging.getLogger(__name__)


class AliasSession:
    """Operations offered to a front end editing one alias file.

    Besides delegating to :class:`StagingStore`, the session keeps the
    selection a front end holds between asking to edit or delete an alias and
    confirming it, plus the currently applied sort order.
    """

    def __init__(self, gateway: AliasFileGateway, store: Optional[StagingStore] = None):
        self.gateway = gateway
        self.store = store if store is not None else StagingStore()
        self.sort_order = SortOrder.NONE
        self.editing_id: uuid.UUID | None = None
        self.delete_target_id: uuid.UUID | None = None
        self.load_failed = False

    @classmethod
    def from_config(cls, config: Config) -> "AliasSession":
        return cls(AliasFileGateway.from_config(config))

    def load_aliases(self) -> Outcome:
        self._clear_selection()
        self.sort_order = SortOrder.NONE
        try:
            text = self.gateway.load()
        except PersistenceError as exc:
            logger.warning("%s; starting with no aliases", exc)
            self.store.initialize([])
            self.load_failed = True
            return Outcome(Status.PERSISTENCE_ERROR, str(exc))

        self.store.initialize(decode(text))
        self.load_failed = False
        count = len(self.store.pending)
        logger.info("Loaded %d aliases from %s", count, self.gateway.path)
        return Outcome(Status.OK, f"Loaded {count} aliases")

    def add_alias(self, name: str, command: str) -> Outcome:
        outcome = self.store.add(name.strip(), command)
        _log_rejection("add", outcome)
        return outcome

    def begin_edit(self, alias_id: uuid.UUID) -> AliasRecord | None:
        record = self.store.get(alias_id)
        self.editing_id = record.id if record is not None else None
        return record

    def cancel_edit(self) -> None:
        self.editing_id = None

    def edit_alias(self, alias_id: uuid.UUID, name: str, command: str) -> Outcome:
        outcome = self.store.update(alias_id, name.strip(), command)
        _log_rejection("edit", outcome)
        if outcome.ok:
            self.editing_id = None
        return outcome

    def request_delete(self, alias_id: uuid.UUID) -> AliasRecord | None:
        record = self.store.get(alias_id)
        self.delete_target_id = record.id if record is not None else None
        return record

    def cancel_delete(self) -> None:
        self.delete_target_id = None

    def confirm_delete(self) -> Outcome:
        target = self.delete_target_id
        if target is None:
            return Outcome(Status.OK, "Nothing to delete")
        return self.delete_alias(target)

    def delete_alias(self, alias_id: uuid.UUID) -> Outcome:
        outcome = self.store.delete(alias_id)
        if self.delete_target_id == alias_id:
            self.delete_target_id = None
        if self.editing_id == alias_id:
            self.editing_id = None
        return outcome

    def sort_aliases(self, order: SortOrder | str) -> SortOrder:
        order = SortOrder(order)
        self.store.sort(order)
        self.sort_order = order
        return order

    def toggle_sort(self) -> SortOrder:
        return self.sort_aliases(self.sort_order.next())

    def search_aliases(self, query: str) -> List[AliasRecord]:
        return self.store.filter(query)

    def apply_changes(self) -> Outcome:
        if self.load_failed:
            # Saving now would overwrite aliases that were never read.
            return Outcome(
                Status.PERSISTENCE_ERROR,
                f"Refusing to save: {self.gateway.path} was not loaded; reload first",
            )
        outcome = self.store.commit(self.gateway.save)
        if outcome.ok:
            logger.info("Applied changes to %s", self.gateway.path)
        return outcome

    def discard_changes(self) -> bool:
        discarded = self.store.rollback()
        self._clear_selection()
        self.sort_order = SortOrder.NONE
        if discarded:
            logger.info("Discarded unsaved alias changes")
        return discarded

    def has_unsaved_changes(self) -> bool:
        return self.store.has_unsaved_changes()

    def status(self) -> Dict[str, Any]:
        return {
            "aliasFile": str(self.gateway.path),
            "pendingCount": len(self.store.pending),
            "committedCount": len(self.store.committed),
            "hasUnsavedChanges": self.store.has_unsaved_changes(),
            "sortOrder": self.sort_order.value,
            "editingId": str(self.editing_id) if self.editing_id else None,
            "deleteTargetId": str(self.delete_target_id) if self.delete_target_id else None,
            "loadFailed": self.load_failed,
        }

    def _clear_selection(self) -> None:
        self.editing_id = None
        self.delete_target_id = None


def _log_rejection(action: str, outcome: Outcome) -> None:
    if outcome.status is Status.COLLISION:
        logger.warning("Rejected %s: %s", action, outcome.message)
    elif not outcome.ok:
        logger.info("Rejected %s: %s", action, outcome.message)
