from __future__ import annotations

import json
import logging
import os
from contextvars import ContextVar
from datetime import datetime
from typing import Optional

from electrohmi.config import env_str

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class JsonLinesFormatter(logging.Formatter):
    """One JSON object per line (backend.jsonl)."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            entry["request_id"] = request_id
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def configure_logging(level: Optional[str] = None, log_dir: Optional[str] = None) -> None:
    level_name = (level or env_str("LOG_LEVEL", "INFO") or "INFO").upper()
    log_dir = log_dir if log_dir is not None else env_str("LOG_DIR")

    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    # idempotent across app reloads / test clients
    if not any(getattr(h, "_electrohmi", False) for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        console._electrohmi = True  # type: ignore[attr-defined]
        root.addHandler(console)

        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            fh = logging.FileHandler(os.path.join(log_dir, "backend.jsonl"), encoding="utf-8")
            fh.setFormatter(JsonLinesFormatter())
            fh.addFilter(RequestIdFilter())
            fh._electrohmi = True  # type: ignore[attr-defined]
            root.addHandler(fh)
