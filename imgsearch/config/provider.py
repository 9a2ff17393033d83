"""
Options collaborator — where the core reads user options from.

The core never caches options: every decision point calls ``get()`` again so
policy is always fresh. Changes are announced through ``subscribe()``.
"""

import inspect
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Optional, Union

from imgsearch.exceptions import ConfigError

from .models import OPTION_KEYS, Options

__all__ = ["OptionsProvider", "MemoryOptionsStore", "load_options_file"]

logger = logging.getLogger(__name__)

ChangeListener = Callable[[dict, str], Union[None, Awaitable[None]]]


class OptionsProvider(ABC):
    """Read-mostly access to the extension's option storage."""

    @abstractmethod
    async def get(self, keys: Optional[Iterable[str]] = None, area: str = "sync") -> dict:
        """
        Return the camelCase options record restricted to *keys*
        (all keys when None).
        """

    @abstractmethod
    def subscribe(self, listener: ChangeListener) -> None:
        """Call ``listener(changes, area)`` after every change."""

    async def options(self, keys: Optional[Iterable[str]] = None) -> Options:
        """Convenience: get() parsed into an Options instance."""
        return Options.from_mapping(await self.get(keys))


class MemoryOptionsStore(OptionsProvider):
    """
    Dict-backed provider.

    Usage::

        provider = MemoryOptionsStore({"disabledEngines": ["baidu"]})
        await provider.set({"tabInBackgound": True})   # notifies listeners
    """

    def __init__(self, initial: Optional[dict] = None) -> None:
        self._data: dict = Options().to_mapping()
        if initial:
            self._data.update(initial)
        self._listeners: list[ChangeListener] = []

    async def get(self, keys: Optional[Iterable[str]] = None, area: str = "sync") -> dict:
        if keys is None:
            keys = OPTION_KEYS
        elif isinstance(keys, str):
            keys = [keys]
        return {k: _copy(self._data[k]) for k in keys if k in self._data}

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    async def set(self, changes: dict, area: str = "sync") -> None:
        """Apply *changes* and notify every listener."""
        diff = {
            key: {"oldValue": self._data.get(key), "newValue": value}
            for key, value in changes.items()
        }
        self._data.update(changes)
        logger.debug("options changed: %s", ", ".join(changes))
        for listener in list(self._listeners):
            result = listener(diff, area)
            if inspect.isawaitable(result):
                await result


def _copy(value: Any) -> Any:
    return list(value) if isinstance(value, list) else value


def load_options_file(path: Union[str, Path]) -> MemoryOptionsStore:
    """
    Build a MemoryOptionsStore from a JSON options record.

    Unknown keys are kept but ignored by the core.

    Raises:
        OSError:     the file cannot be read.
        ConfigError: the file is not a JSON object.
    """
    try:
        record = json.loads(Path(path).expanduser().read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ConfigError(f"options file is not valid JSON: {path}: {exc}") from exc
    if not isinstance(record, dict):
        raise ConfigError(f"options file must hold a JSON object: {path}")
    return MemoryOptionsStore(record)
