"""Interface messages: bundled YAML defaults plus an optional site override file."""

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from cookie_warning.config import MESSAGES_DIR

logger = logging.getLogger(__name__)

DISABLED_VALUE = "-"


@dataclass(frozen=True)
class Message:
    key: str
    value: str | None = None

    def exists(self) -> bool:
        return self.value is not None

    def is_disabled(self) -> bool:
        return self.value is None or self.value.strip() in ("", DISABLED_VALUE)

    def text(self) -> str:
        """Message text, empty when the message is missing or disabled."""
        if self.is_disabled():
            return ""
        return self.value.strip()


def _load_yaml(path: Path) -> dict[str, str]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not load messages from %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring messages file %s: expected a mapping", path)
        return {}
    return {str(k): "" if v is None else str(v) for k, v in data.items()}


class MessageSource:
    def __init__(self, overrides_path: Path | None = None,
                 overrides: dict[str, str] | None = None,
                 lang: str = "en"):
        self._messages = _load_yaml(MESSAGES_DIR / f"{lang}.yaml")
        if overrides_path:
            self._messages.update(_load_yaml(overrides_path))
        if overrides:
            self._messages.update(overrides)

    def get(self, key: str) -> Message:
        return Message(key, self._messages.get(key))

    def text(self, key: str) -> str:
        return self.get(key).text()
