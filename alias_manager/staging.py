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

"""Committed/pending staging of alias edits."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .aliases import AliasRecord, encode
from .errors import PersistenceError

logger = logging.getLogger(__name__)


class Status(str, Enum):
    OK = "ok"
    VALIDATION_ERROR = "validation-error"
    COLLISION = "collision"
    NOT_FOUND = "not-found"
    PERSISTENCE_ERROR = "persistence-error"


class SortOrder(str, Enum):
    NONE = "none"
    ASCENDING = "ascending"
    DESCENDING = "descending"

    def next(self) -> "SortOrder":
        """Order that follows this one when the sort control is toggled."""
        cycle = (SortOrder.NONE, SortOrder.ASCENDING, SortOrder.DESCENDING)
        return cycle[(cycle.index(self) + 1) % len(cycle)]


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of a store operation. Failures never raise."""

    status: Status
    message: str = ""
    record: Optional[AliasRecord] = None
    changed: bool = False

    @property
    def ok(self) -> bool:
        return self.status is Status.OK

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "status": self.status.value,
            "message": self.message,
            "changed": self.changed,
        }
        if self.record is not None:
            payload["alias"] = self.record.to_payload()
        return payload


SaveFn = Callable[[str], None]


class StagingStore:
    """Holds the last-saved aliases and the working copy being edited.

    ``committed`` only changes on :meth:`initialize` and a successful
    :meth:`commit`; every other mutation touches ``pending``.
    """

    def __init__(self, records: Iterable[AliasRecord] = ()):
        self._committed: Tuple[AliasRecord, ...] = ()
        self._pending: Tuple[AliasRecord, ...] = ()
        self._saving = False
        self.initialize(records)

    @property
    def committed(self) -> Tuple[AliasRecord, ...]:
        return self._committed

    @property
    def pending(self) -> Tuple[AliasRecord, ...]:
        return self._pending

    def initialize(self, records: Iterable[AliasRecord]) -> None:
        unique = _drop_shadowed(records)
        self._committed = unique
        self._pending = unique

    def get(self, target_id: uuid.UUID) -> AliasRecord | None:
        for record in self._pending:
            if record.id == target_id:
                return record
        return None

    def find_by_name(self, name: str) -> AliasRecord | None:
        for record in self._pending:
            if record.name == name:
                return record
        return None

    def add(self, name: str, command: str) -> Outcome:
        invalid = _validate(name, command)
        if invalid is not None:
            return invalid

        if self.find_by_name(name) is not None:
            return Outcome(Status.COLLISION, f"Alias '{name}' already exists")

        record = AliasRecord(name=name, command=command)
        self._pending = self._pending + (record,)
        logger.debug("Staged new alias %s", name)
        return Outcome(Status.OK, f"Alias '{name}' added", record=record, changed=True)

    def update(self, target_id: uuid.UUID, name: str, command: str) -> Outcome:
        invalid = _validate(name, command)
        if invalid is not None:
            return invalid

        current = self.get(target_id)
        if current is None:
            return Outcome(Status.NOT_FOUND, f"No alias with id {target_id}")

        if any(r.name == name and r.id != target_id for r in self._pending):
            return Outcome(Status.COLLISION, f"Alias '{name}' already exists")

        replacement = current.replace(name, command)
        self._pending = tuple(replacement if r.id == target_id else r for r in self._pending)
        logger.debug("Staged update of alias %s -> %s", current.name, name)
        return Outcome(
            Status.OK,
            f"Alias '{name}' updated",
            record=replacement,
            changed=replacement != current,
        )

    def delete(self, target_id: uuid.UUID) -> Outcome:
        current = self.get(target_id)
        if current is None:
            return Outcome(Status.OK, "Nothing to delete")

        self._pending = tuple(r for r in self._pending if r.id != target_id)
        logger.debug("Staged deletion of alias %s", current.name)
        return Outcome(Status.OK, f"Alias '{current.name}' deleted", record=current, changed=True)

    def sort(self, order: SortOrder) -> None:
        if order is SortOrder.NONE:
            positions = {record.id: idx for idx, record in enumerate(self._committed)}
            known = sorted((r for r in self._pending if r.id in positions), key=lambda r: positions[r.id])
            added = [r for r in self._pending if r.id not in positions]
            self._pending = tuple(known + added)
            return

        reverse = order is SortOrder.DESCENDING
        self._pending = tuple(sorted(self._pending, key=lambda r: r.name, reverse=reverse))

    def filter(self, query: str) -> List[AliasRecord]:
        if not query:
            return list(self._pending)

        needle = query.lower()
        return [r for r in self._pending if needle in r.name.lower() or needle in r.command.lower()]

    def has_unsaved_changes(self) -> bool:
        return self._pending != self._committed

    def commit(self, save: SaveFn) -> Outcome:
        """Write ``pending`` through ``save`` and promote it once the write succeeded."""
        if self._saving:
            return Outcome(Status.PERSISTENCE_ERROR, "A save is already in progress")

        snapshot = self._pending
        changed = snapshot != self._committed
        self._saving = True
        try:
            save(encode(snapshot))
        except PersistenceError as exc:
            logger.error("Commit failed; keeping previous committed aliases: %s", exc)
            return Outcome(Status.PERSISTENCE_ERROR, str(exc))
        finally:
            self._saving = False

        self._committed = snapshot
        return Outcome(Status.OK, f"Saved {len(snapshot)} aliases", changed=changed)

    def rollback(self) -> bool:
        """Discard pending edits. Returns whether anything was discarded."""
        discarded = self.has_unsaved_changes()
        self._pending = self._committed
        return discarded


def _validate(name: str, command: str) -> Outcome | None:
    if not name or not command:
        return Outcome(Status.VALIDATION_ERROR, "Alias name and command must not be empty")
    if "=" in name:
        # The line codec splits on the only '=' in a definition.
        return Outcome(Status.VALIDATION_ERROR, f"Alias name '{name}' must not contain '='")
    return None


def _drop_shadowed(records: Iterable[AliasRecord]) -> Tuple[AliasRecord, ...]:
    # Later definitions win, as they do when the shell sources the file.
    seen: set[str] = set()
    kept: List[AliasRecord] = []
    for record in reversed(list(records)):
        if record.name in seen:
            logger.debug("Alias %s is redefined later in the file; dropping earlier definition", record.name)
            continue
        seen.add(record.name)
        kept.append(record)
    kept.reverse()
    return tuple(kept)
