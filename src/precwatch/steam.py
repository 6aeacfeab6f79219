"""Locating the Team Fortress 2 console log of a local Steam installation."""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

CONSOLE_LOG_RELATIVE = Path("steamapps", "common", "Team Fortress 2", "tf", "console.log")


class SteamNotFoundError(Exception):
    """Raised when no Steam installation can be found."""


def candidate_steam_dirs(platform: Optional[str] = None) -> List[Path]:
    """Return the directories a Steam installation usually lives in."""

    platform = platform or sys.platform
    candidates: List[Path] = []

    override = os.environ.get("STEAM_DIR")
    if override:
        candidates.append(Path(override).expanduser())

    home = Path.home()
    if platform.startswith("win"):
        for env_name in ("ProgramFiles(x86)", "ProgramFiles"):
            base = os.environ.get(env_name)
            if base:
                candidates.append(Path(base) / "Steam")
    elif platform == "darwin":
        candidates.append(home / "Library" / "Application Support" / "Steam")
    else:
        candidates.extend(
            [
                home / ".steam" / "steam",
                home / ".local" / "share" / "Steam",
                home / ".var" / "app" / "com.valvesoftware.Steam" / ".local" / "share" / "Steam",
            ]
        )
    return candidates


def locate_console_log(platform: Optional[str] = None) -> Path:
    """Return the console.log path of the first Steam installation found."""

    candidates = candidate_steam_dirs(platform)
    for steam_dir in candidates:
        if (steam_dir / "steamapps").is_dir():
            path = steam_dir / CONSOLE_LOG_RELATIVE
            logger.info("Using Steam installation at %s", steam_dir)
            return path

    searched = ", ".join(str(path) for path in candidates) or "<none>"
    raise SteamNotFoundError(f"No Steam installation found (searched: {searched})")
