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

"""FastMCP server exposing the alias editing session as tools and resources."""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import uuid
from types import FrameType
from typing import Any, Dict, Iterable, List, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from . import __version__
from .aliases import AliasRecord
from .config import Config
from .session import AliasSession
from .staging import Outcome, SortOrder

logger = logging.getLogger(__name__)


def _parse_id(alias_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(alias_id)
    except (TypeError, ValueError) as exc:
        raise ToolError(f"Invalid alias id {alias_id!r}") from exc


def _records_payload(records: Iterable[AliasRecord]) -> List[Dict[str, Any]]:
    return [record.to_payload() for record in records]


def create_app(config: Config, session: Optional[AliasSession] = None) -> FastMCP:
    if session is None:
        session = AliasSession.from_config(config)
        session.load_aliases()

    server = FastMCP(
        "alias-manager",
        instructions=(
            "Edit shell aliases in a staging area. Changes are only written to "
            f"{session.gateway.path} when alias.apply is called."
        ),
        version=__version__,
    )

    def outcome_payload(outcome: Outcome) -> Dict[str, Any]:
        payload = outcome.to_payload()
        payload["hasUnsavedChanges"] = session.has_unsaved_changes()
        return payload

    @server.tool(name="alias.list", description="List pending aliases in their current order.")
    async def alias_list() -> Dict[str, Any]:
        return {
            "aliases": _records_payload(session.store.pending),
            "sortOrder": session.sort_order.value,
            "hasUnsavedChanges": session.has_unsaved_changes(),
        }

    @server.tool(name="alias.search", description="Case-insensitive search over alias names and commands.")
    async def alias_search(query: str = "") -> Dict[str, Any]:
        return {"query": query, "aliases": _records_payload(session.search_aliases(query))}

    @server.tool(name="alias.add", description="Stage a new alias.")
    async def alias_add(name: str, command: str) -> Dict[str, Any]:
        return outcome_payload(session.add_alias(name, command))

    @server.tool(name="alias.edit", description="Stage a change to an existing alias.")
    async def alias_edit(alias_id: str, name: str, command: str) -> Dict[str, Any]:
        return outcome_payload(session.edit_alias(_parse_id(alias_id), name, command))

    @server.tool(name="alias.delete", description="Stage removal of an alias.")
    async def alias_delete(alias_id: str) -> Dict[str, Any]:
        return outcome_payload(session.delete_alias(_parse_id(alias_id)))

    @server.tool(name="alias.sort", description="Sort pending aliases: none, ascending or descending.")
    async def alias_sort(order: str) -> Dict[str, Any]:
        try:
            applied = session.sort_aliases(order)
        except ValueError as exc:
            choices = ", ".join(o.value for o in SortOrder)
            raise ToolError(f"Unknown sort order {order!r}; expected one of {choices}") from exc
        return {
            "sortOrder": applied.value,
            "aliases": _records_payload(session.store.pending),
            "hasUnsavedChanges": session.has_unsaved_changes(),
        }

    @server.tool(name="alias.apply", description="Write staged changes to the alias file.")
    async def alias_apply() -> Dict[str, Any]:
        return outcome_payload(session.apply_changes())

    @server.tool(name="alias.discard", description="Drop staged changes and return to the saved aliases.")
    async def alias_discard() -> Dict[str, Any]:
        discarded = session.discard_changes()
        return {"discarded": discarded, "hasUnsavedChanges": session.has_unsaved_changes()}

    @server.tool(name="alias.reload", description="Reload aliases from disk, dropping staged changes.")
    async def alias_reload() -> Dict[str, Any]:
        return outcome_payload(session.load_aliases())

    @server.tool(name="alias.status", description="Report the alias file and staging state.")
    async def alias_status() -> Dict[str, Any]:
        return session.status()

    @server.resource("alias://pending", description="Pending aliases as JSON.", mime_type="application/json")
    async def alias_pending_resource() -> str:
        return json.dumps(_records_payload(session.store.pending), indent=2)

    @server.resource("alias://committed", description="Saved aliases as JSON.", mime_type="application/json")
    async def alias_committed_resource() -> str:
        return json.dumps(_records_payload(session.store.committed), indent=2)

    @server.resource("alias://{alias_name}", mime_type="application/json")
    async def alias_detail_resource(alias_name: str) -> str:
        record = session.store.find_by_name(alias_name)
        if record is None:
            raise ToolError(f"Alias '{alias_name}' is not defined")
        return json.dumps(record.to_payload(), indent=2)

    return server


def run(config: Config) -> None:
    server = create_app(config)
    # Install basic signal handlers so we can log clean shutdown intent.
    def _handle_signal(signum: int, _frame: FrameType | None) -> None:  # pragma: no cover - dependent on signal delivery
        logger.info("Received signal %s; shutting down.", signum)
        raise KeyboardInterrupt

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            signal.signal(sig, _handle_signal)
        except (ValueError, AttributeError):  # pragma: no cover - platform limitations
            pass

    try:
        if config.transport != "stdio":
            asyncio.run(
                server.run_http_async(
                    show_banner=False,
                    transport=config.transport,
                    host=config.http_host,
                    port=config.http_port,
                    path=config.http_path,
                )
            )
        elif hasattr(server, "run_stdio"):
            server.run_stdio()
        elif hasattr(server, "run"):
            server.run()
        else:  # pragma: no cover - safety guard for unexpected fastmcp versions
            raise RuntimeError("FastMCP server implementation missing run method")
    except KeyboardInterrupt:
        logger.info("Server stopped by user request.")
