#!/usr/bin/env python3
"""
Supadata Command Dispatcher - Main Entry Point

Loads configuration, sets up logging, dispatches a single command and
prints its reply envelope as JSON on stdout.
"""

import sys
import asyncio
from dataclasses import replace
from typing import List, Optional

from supadata_mcp.cli.arguments import CLIManager
from supadata_mcp.core.base import ConfigurationError
from supadata_mcp.core.config import ConfigManager
from supadata_mcp.core.logging import setup_logging, get_logger
from supadata_mcp.utils.component_factory import create_dispatcher


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    cli_manager = CLIManager()
    args = cli_manager.parse_arguments(argv)

    if args.list_tools:
        print(cli_manager.format_tool_list())
        return 0

    config_manager = ConfigManager(args.config)
    try:
        config_manager.load_config()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging_config = config_manager.logging_config
    setup_logging(
        level=args.log_level or logging_config.level,
        log_file=logging_config.file,
        max_size=logging_config.max_size,
        backup_count=logging_config.backup_count
    )
    logger = get_logger()

    if args.max_attempts is not None:
        config_manager.retry_config = replace(config_manager.retry_config, max_attempts=args.max_attempts)

    try:
        config_manager.validate_config()
    except ConfigurationError as e:
        logger.error(f"Configuration validation failed: {e}")
        return 1

    try:
        tool_args = cli_manager.get_tool_arguments(args)
    except ValueError as e:
        logger.error(str(e))
        return 1

    dispatcher = create_dispatcher(config_manager.as_dict())
    try:
        envelope = await dispatcher.dispatch(args.tool, tool_args)
    finally:
        await dispatcher.client.cleanup()

    print(envelope.to_json(indent=2))
    return 1 if envelope.is_error else 0


def run() -> None:
    """Console script entry point"""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
