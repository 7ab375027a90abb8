# src/pymstest/telemetry/logger/processors.py

"""
Custom structlog processors used by the pymstest logging pipeline.
"""

import logging
from typing import Any

from structlog.typing import EventDict, WrappedLogger

LOG_EMOJIS: dict[int | str, str] = {
    logging.DEBUG: "🐛",
    logging.INFO: "ℹ️",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
    "launch": "🚀",
    "parse": "🔎",
    "test": "🧪",
    "done": "🏁",
    "anomaly": "🚫",
    "general": "➡️",
}

# Keys only used to pick an emoji; never rendered.
_INTERNAL_KEYS = ("emoji_key",)


def add_emoji_processor(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Prefix the event message with an emoji for its level or explicit emoji_key."""
    emoji_key: Any = event_dict.get("emoji_key")
    if emoji_key is None:
        level = logging.getLevelName(method_name.upper())
        emoji = LOG_EMOJIS.get(level, LOG_EMOJIS["general"])
    else:
        emoji = LOG_EMOJIS.get(emoji_key, LOG_EMOJIS["general"])

    event = event_dict.get("event")
    if isinstance(event, str):
        event_dict["event"] = f"{emoji} {event}"
    return event_dict


def remove_extra_keys_processor(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Drop helper keys that only steer other processors."""
    for key in _INTERNAL_KEYS:
        event_dict.pop(key, None)
    return event_dict


# 🔼⚙️
