# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

#src/hostinit/logging/log.py

from __future__ import annotations

import logging
import time
from pathlib import Path
from datetime import datetime, timezone
import uuid

def init_logging(
    *,
    base_dir: Path | None = None,
    name: str = "hostinit",
    installer: str = "init",
    verbose: bool = False,
) -> tuple[logging.Logger, str, Path | None]:
    """
    Initializes:
      - console lines: "<UTC time> | LEVEL | message"
      - a full DEBUG trace file per run (every command, set -x style)
      - returns run_id so observers can reuse it

    If the log directory cannot be created the run continues console-only.
    """
    run_id = str(uuid.uuid4())

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    formatter.converter = time.gmtime

    # Console = INFO by default, DEBUG when --verbose is passed
    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    if base_dir is None:
        base_dir = Path.home() / ".hostinit" / "logs"

    log_path: Path | None = None
    try:
        base_dir.mkdir(parents=True, exist_ok=True)
        ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        log_path = base_dir / f"{installer}-{ts}-{run_id}.log"
        # File = FULL TRACE
        fh = logging.FileHandler(log_path)
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        logger.addHandler(fh)
    except OSError as e:
        log_path = None
        logger.warning("file logging disabled (%s)", e)

    logger.debug("=== hostinit %s run started ===", installer)
    logger.debug("run_id=%s", run_id)
    if log_path:
        logger.info("log_file=%s", log_path)

    return logger, run_id, log_path
