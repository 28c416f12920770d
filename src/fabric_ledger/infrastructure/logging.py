"""Logging setup shared by the CLI and the HTTP app.

Ledger modules log through module loggers and attach the lot or
operation they act on as ``extra`` fields; the JSON formatter carries
those fields through so a lot's stock movements can be followed.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from fabric_ledger.infrastructure.config import Settings, get_settings

HANDLER_NAME = "fabric_ledger"

# ``extra`` keys copied into JSON lines when a record carries them
CONTEXT_FIELDS = ("lot_no", "op_id")

# Chatty libraries kept at WARNING unless LOG_LEVEL is DEBUG
QUIET_LOGGERS = ("httpx", "multipart", "uvicorn.access")


class JsonFormatter(logging.Formatter):
    def __init__(self, app_name: str, environment: str) -> None:
        super().__init__()
        self._static = {"app": app_name, "environment": environment}

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **self._static,
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def setup_logging(settings: Optional[Settings] = None) -> logging.Handler:
    """Install (or replace) the project's handler on the root logger.

    Handlers installed by anyone else are left alone.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    if settings.LOG_JSON:
        handler.setFormatter(JsonFormatter(settings.APP_NAME, settings.ENVIRONMENT))
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)s %(name)s - %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)
    root.setLevel(level)
    root.addHandler(handler)

    if level > logging.DEBUG:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    return handler
