"""Logging helpers for sampled matrix multiplication and its experiments."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict


def get_logger(name: str = "sampled_matmul") -> logging.Logger:
    """Return a configured logger for the project.

    Parameters
    ----------
    name:
        Logger name; defaults to the shared package logger.

    Returns
    -------
    logging.Logger
        Logger with a single stream handler attached.
    """

    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(logging.INFO)
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def append_jsonl(path: Path, record: Dict[str, Any]) -> None:
    """Append one experiment record as a single JSON line.

    Parameters
    ----------
    path:
        Destination ``.jsonl`` file; parent directories are created.
    record:
        JSON-serialisable mapping.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        json.dump(record, f)
        f.write("\n")
