"""Watch an intake folder and file new documents by their effective date.

New ``.pdf``, ``.eml`` and ``.msg`` files under the watched root are renamed
to ``yyyyMMdd <name>`` and moved into a ``yyyyMM`` subfolder of the root.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from app.utils.config import WatchSettingsStore, get_settings, resolve_watch_configuration
from app.utils.log_setup import configure_logging
from domains.date_filing.diagnostics import run_diagnostics
from domains.date_filing.errors import SetupError
from domains.date_filing.service import DateFilingService


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""

    parser = argparse.ArgumentParser(
        description="Rename and file new documents into yyyyMM folders by date.",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Directory to watch (default: stored setting, then ~/Downloads).",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: DATEFILER_LOG_LEVEL or INFO).",
    )
    parser.add_argument(
        "--diagnose",
        action="store_true",
        help="Check write access and list the root before watching.",
    )
    parser.add_argument(
        "--once",
        type=Path,
        nargs="+",
        default=None,
        metavar="PATH",
        help="File the given documents and exit instead of watching.",
    )

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the CLI script."""

    args = parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level, settings.log_file)

    store = WatchSettingsStore(settings.settings_file)
    config = resolve_watch_configuration(
        store,
        default_root=settings.default_watch_path,
        override=args.root or settings.watch_path,
    )

    root = config.root_path
    if not root.is_dir():
        logger.error(f"Watch path does not exist or is not a directory: {root}")
        return 1

    if args.diagnose:
        run_diagnostics(root)

    service = DateFilingService.from_settings(config, settings)

    if args.once:
        filed = service.process_paths(args.once)
        logger.info(f"Filed {filed} of {len(args.once)} file(s)")
        return 0

    service.install_signal_handlers()
    try:
        service.run()
    except SetupError as e:
        logger.error(f"Date filing watcher failed to start: {e}")
        return 1

    return 0


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
