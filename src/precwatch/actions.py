"""Dynamic demo hook loading and invocation."""
from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, cast

from .config import DemoHookConfig

logger = logging.getLogger(__name__)


DemoCallback = Callable[["DemoContext", Dict[str, Any]], None]


@dataclass(frozen=True)
class DemoContext:
    """Context passed to demo hook callbacks."""

    demo_path: Path
    log_dir: Path


class DemoHook:
    """Callable wrapper around the configured demo callback."""

    def __init__(self, name: str, callback: DemoCallback, options: Dict[str, Any], *, log_dir: Path):
        self.name = name
        self._callback = callback
        self._options = options
        self._log_dir = log_dir

    @classmethod
    def from_config(cls, config: DemoHookConfig, *, log_dir: Path) -> "DemoHook":
        module = _import_module(config.module)
        try:
            callback = getattr(module, config.function)
        except AttributeError as exc:
            raise RuntimeError(
                f"Demo hook could not find function '{config.function}' in {config.module}"
            ) from exc

        if not callable(callback):
            raise RuntimeError(
                f"Demo hook attribute '{config.function}' in {config.module} is not callable"
            )

        name = f"{config.module}.{config.function}"
        logger.info("Loaded demo hook %s", name)
        return cls(name, cast(DemoCallback, callback), dict(config.options or {}), log_dir=log_dir)

    def __call__(self, demo_path: Path) -> None:
        context = DemoContext(demo_path=demo_path, log_dir=self._log_dir)
        logger.debug("Dispatching demo hook %s for %s", self.name, demo_path)
        try:
            self._callback(context, self._options)
        except Exception:
            logger.exception("Demo hook %s failed for %s", self.name, demo_path)


def _import_module(module_path: str) -> ModuleType:
    try:
        return importlib.import_module(module_path)
    except ImportError as exc:
        raise RuntimeError(f"Unable to import demo hook module '{module_path}'") from exc
