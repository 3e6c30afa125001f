"""
Main entry point for termshell.
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .constants import APP_DESCRIPTION, APP_NAME, APP_VERSION


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description=APP_DESCRIPTION
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"{APP_NAME} {APP_VERSION}"
    )

    parser.add_argument(
        "-c", "--command",
        type=str,
        help="Execute a single command line and exit"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to config file"
    )

    parser.add_argument(
        "--no-state",
        action="store_true",
        help="Keep command state in memory only"
    )

    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    from .config import get_config
    config = get_config(Path(args.config) if args.config else None).config

    configure_logging(config.log_level)

    from .cli import TermShell
    key_value_store = None
    if args.no_state:
        from .storage import InMemoryKeyValueStore
        key_value_store = InMemoryKeyValueStore()

    shell = TermShell(config=config, key_value_store=key_value_store)

    if args.command:
        code = asyncio.run(shell.execute(args.command))
        return 0 if code == 0 else 1

    try:
        shell.run()
        return 0
    except KeyboardInterrupt:
        print("\nGoodbye!")
        return 0
    except Exception as e:
        print(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
