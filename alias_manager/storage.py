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

"""Reading and writing the alias file on disk."""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path

from .config import Config
from .errors import PersistenceError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AliasFileGateway:
    """Load/save primitives for a single alias file."""

    path: Path

    @classmethod
    def from_config(cls, config: Config) -> "AliasFileGateway":
        return cls(path=config.alias_file)

    def load(self) -> str:
        """Return the file contents, creating an empty file when it is missing.

        Undecodable bytes are kept as surrogates so they survive a later save.
        """
        if not self.path.exists():
            logger.info("Alias file %s does not exist; creating it", self.path)
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.touch()
            except OSError as exc:
                raise PersistenceError(f"Failed to create alias file {self.path}") from exc
            return ""

        try:
            text = self.path.read_text(encoding="utf-8", errors="surrogateescape")
        except OSError as exc:
            raise PersistenceError(f"Failed to read alias file {self.path}") from exc

        logger.info("Loaded alias file %s (%d bytes)", self.path, len(text))
        return text

    def save(self, text: str) -> None:
        """Replace the file contents atomically via a temporary sibling file.

        A symlinked alias file is written through: the temporary file is
        created next to the link target and renamed over it.
        """
        tmp_name: str | None = None
        try:
            target = self.path.resolve()
            target.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                errors="surrogateescape",
                dir=str(target.parent),
                prefix=f".{target.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            # mkstemp creates 0600 files; keep the existing file's mode.
            if target.exists():
                os.chmod(tmp_name, stat.S_IMODE(target.stat().st_mode))
            os.replace(tmp_name, target)
        except (OSError, UnicodeError) as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Failed to write alias file {self.path}: {exc}") from exc

        logger.info("Saved alias file %s (%d bytes)", target, len(text))
