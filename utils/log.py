from __future__ import annotations

import os
import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional, Dict


LOG_DIR = "logs"
LOG_PATH = os.path.join(LOG_DIR, "pipeline.log")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: int = logging.INFO, filename: Optional[str] = None) -> None:
    """Configure stdlib logging for the API server and the CLI scripts."""
    logging.basicConfig(level=level, filename=filename, format=LOG_FORMAT)


def log_event(stage: str, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
    """
    Append a structured log line to logs/pipeline.log.

    Each line is a JSON object:
        {
          "ts": "...",
          "stage": "LOAD_TABLES",
          "message": "tables loaded",
          "extra": { ... }
        }
    """
    try:
        os.makedirs(LOG_DIR, exist_ok=True)
        rec: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "stage": stage,
            "message": message,
        }
        if extra is not None:
            rec["extra"] = extra

        with open(LOG_PATH, "a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False, default=str) + "\n")
    except Exception:
        # Logging must never crash the app.
        logging.getLogger(__name__).debug("log_event failed", exc_info=True)
