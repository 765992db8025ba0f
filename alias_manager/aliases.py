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

"""Alias records and the line codec for alias files."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

DEFINITION_KEYWORD = "alias"
_PREFIX = f"{DEFINITION_KEYWORD} "
_QUOTES = "'\""


@dataclass(frozen=True, slots=True)
class AliasRecord:
    """One shell alias.

    Equality and hashing cover ``name`` and ``command`` only; ``id`` identifies
    the record across edits and never takes part in comparisons.
    """

    name: str
    command: str
    id: uuid.UUID = field(default_factory=uuid.uuid4, compare=False)

    def replace(self, name: str, command: str) -> "AliasRecord":
        """Return a new record with the given values, keeping this record's id."""
        return AliasRecord(name=name, command=command, id=self.id)

    def to_payload(self) -> Dict[str, Any]:
        return {"id": str(self.id), "name": self.name, "command": self.command}


@dataclass(frozen=True, slots=True)
class ParsedLine:
    """Result of parsing a single line: either a record or a skip reason."""

    lineno: Optional[int]
    text: str
    record: Optional[AliasRecord] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.record is not None


def parse_line(line: str, lineno: Optional[int] = None) -> ParsedLine:
    if not line.startswith(_PREFIX):
        return ParsedLine(lineno, line, reason=f"missing '{_PREFIX}' prefix")

    components = line.split("=")
    if len(components) != 2:
        return ParsedLine(lineno, line, reason=f"expected one '=', found {len(components) - 1}")

    lhs, rhs = components
    name = lhs[len(_PREFIX):].strip()
    if not name:
        return ParsedLine(lineno, line, reason="empty alias name")

    command = rhs.strip(_QUOTES)
    return ParsedLine(lineno, line, record=AliasRecord(name=name, command=command))


def decode(text: str) -> List[AliasRecord]:
    """Parse alias file text, silently dropping lines that are not definitions."""
    records: List[AliasRecord] = []
    for idx, line in enumerate(text.split("\n"), start=1):
        line = line.rstrip("\r")
        if not line:
            continue

        parsed = parse_line(line, idx)
        if parsed.record is None:
            logger.debug("Dropping line %d (%s): %r", idx, parsed.reason, line)
            continue
        records.append(parsed.record)

    return records


def format_line(record: AliasRecord) -> str:
    # Single quotes inside the command are written as-is and do not survive decode.
    return f"{DEFINITION_KEYWORD} {record.name}='{record.command}'"


def encode(records: Iterable[AliasRecord]) -> str:
    return "\n".join(format_line(record) for record in records)
