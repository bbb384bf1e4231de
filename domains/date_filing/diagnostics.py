"""Startup diagnostics: permission probe and directory listing."""

import tempfile
from pathlib import Path

from loguru import logger


def probe_write_access(root: Path) -> bool:
    """
    Create and remove a temporary file in ``root``.

    Returns:
        True if the directory is writable
    """
    try:
        with tempfile.NamedTemporaryFile(dir=root, prefix=".datefiler-probe-", suffix=".ini"):
            pass
    except OSError as e:
        logger.error(f"No write access to {root}: {e}")
        return False

    logger.success(f"Write access to {root} confirmed")
    return True


def list_directory(root: Path) -> list[Path]:
    """Log and return the direct children of ``root``."""
    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name.lower())
    except OSError as e:
        logger.error(f"Cannot list {root}: {e}")
        return []

    logger.info(f"{root} contains {len(entries)} entries")
    for entry in entries:
        kind = "dir " if entry.is_dir() else "file"
        logger.info(f"  [{kind}] {entry.name}")
    return entries


def run_diagnostics(root: Path) -> bool:
    """Run all startup checks; returns False if the root is not writable."""
    logger.info(f"Running diagnostics for {root}")
    writable = probe_write_access(root)
    list_directory(root)
    return writable
