"""Demo hook callbacks that can be referenced from configuration."""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List

from .actions import DemoContext

logger = logging.getLogger(__name__)

# Files the game writes next to a demo when event recording is enabled.
_SIDECAR_SUFFIXES = (".json", "_events.txt")


def log_demo(context: DemoContext, options: Dict[str, Any]) -> None:
    """Log the finished demo and its size."""

    level_name = str(options.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    try:
        size = context.demo_path.stat().st_size
    except FileNotFoundError:
        logger.warning("Demo %s does not exist", context.demo_path)
        return

    logger.log(level, "Demo finished: %s (%.2f MB)", context.demo_path, size / (1024 * 1024))


def archive_demo(context: DemoContext, options: Dict[str, Any]) -> None:
    """Copy the demo and its sidecar files into ``options['destination']``."""

    destination_option = options.get("destination")
    if not destination_option:
        logger.error("archive_demo requires a 'destination' option")
        return

    destination = Path(str(destination_option)).expanduser()
    if not destination.is_absolute():
        destination = context.log_dir / destination

    sources = _demo_files(context.demo_path)
    if not sources:
        logger.warning("Demo %s does not exist; nothing to archive", context.demo_path)
        return

    destination.mkdir(parents=True, exist_ok=True)
    for source in sources:
        target = destination / source.name
        shutil.copy2(source, target)
        logger.info("Archived %s -> %s", source, target)


def _demo_files(demo_path: Path) -> List[Path]:
    candidates = [demo_path]
    stem = demo_path.with_suffix("")
    candidates.extend(Path(f"{stem}{suffix}") for suffix in _SIDECAR_SUFFIXES)
    return [path for path in candidates if path.is_file()]
