"""sessionctl/logging_setup.py — Structured JSON logging via stdlib."""
from __future__ import annotations
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Extra keys copied from the record into the JSON line. Reading record.__dict__
# wholesale would also pull in logging's own attributes.
_KNOWN_EXTRAS = (
    "state", "from_state", "kind", "strategy", "step", "trace", "delay_s",
    "error", "error_type",
)


class _JSONFormatter(logging.Formatter):
    """Formats every log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        for k in _KNOWN_EXTRAS:
            val = getattr(record, k, None)
            if val is not None:
                data[k] = val

        if record.exc_info:
            if not record.exc_text:
                record.exc_text = self.formatException(record.exc_info)
            data["exc_info"] = record.exc_text

        return json.dumps(data, default=str)


_configured = False

def configure_logging(log_level: str = "INFO", log_path: str | None = None) -> None:
    global _configured
    if _configured:
        return
    _configured = True

    level = getattr(logging, log_level.upper(), logging.INFO)
    formatter = _JSONFormatter()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_path:
        p = Path(log_path).expanduser()
        p.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(p), mode="a", encoding="utf-8"))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    for h in handlers:
        h.setFormatter(formatter)
        root.addHandler(h)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
