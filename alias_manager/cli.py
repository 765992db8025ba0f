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

"""Command-line entry point for the alias manager server."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import TRANSPORTS, Config
from .server import run

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve staged editing of a shell alias file over MCP.")
    parser.add_argument("--config", type=Path, help="Path to configuration file.")
    parser.add_argument(
        "--alias-file",
        dest="alias_file",
        help="Alias file to edit (default: ~/.bash_aliases).",
    )
    parser.add_argument(
        "--transport",
        choices=list(TRANSPORTS),
        help="Transport to run the server with (default: stdio).",
    )
    parser.add_argument("--http-host", help="Host to bind when using HTTP-based transports.")
    parser.add_argument("--http-port", type=int, help="Port to bind when using HTTP-based transports.")
    parser.add_argument(
        "--http-path",
        help="URL path for HTTP/SSE transports (default: /mcp).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging.",
    )
    return parser.parse_args(argv)


def build_cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}

    if args.alias_file:
        overrides["alias_file"] = str(Path(args.alias_file).expanduser())
    if args.transport:
        overrides["transport"] = args.transport
    if args.http_host:
        overrides["http_host"] = args.http_host
    if args.http_port is not None:
        overrides["http_port"] = args.http_port
    if args.http_path:
        overrides["http_path"] = args.http_path

    return overrides


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging(args.verbose)

    overrides = build_cli_overrides(args)
    config = Config.load(config_path=args.config, cli_overrides=overrides)
    logger.info("Starting alias manager for %s", config.alias_file)
    run(config)


if __name__ == "__main__":
    main()
