"""Verified config snapshots.

The JSON snapshot is for people and other tools; the binary snapshot
(gzip-compressed pickle of the model dump) is what servers load at startup.
Both are re-checked for dangling handles when read back.
"""

import gzip
import logging
import pickle
from pathlib import Path

from .content import Config
from .handles import check_handles

logger = logging.getLogger(__name__)


def write_json_snapshot(config: Config, path: str | Path) -> None:
    path = Path(path)
    path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
    logger.info("JSON snapshot written: path=%s", path)


def read_json_snapshot(path: str | Path) -> Config:
    path = Path(path)
    config = Config.model_validate_json(path.read_text(encoding="utf-8"))
    check_handles(config)
    logger.info("JSON snapshot loaded: path=%s", path)
    return config


def write_binary_snapshot(config: Config, path: str | Path) -> None:
    path = Path(path)
    payload = pickle.dumps(config.model_dump(mode="python"), protocol=pickle.HIGHEST_PROTOCOL)
    with gzip.open(path, "wb") as f:
        f.write(payload)
    logger.info("Binary snapshot written: path=%s, bytes=%d", path, len(payload))


def read_binary_snapshot(path: str | Path) -> Config:
    path = Path(path)
    with gzip.open(path, "rb") as f:
        data = pickle.load(f)
    config = Config.model_validate(data)
    check_handles(config)
    logger.info("Binary snapshot loaded: path=%s", path)
    return config
