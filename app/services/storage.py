"""Local-filesystem blob store for product images."""

import logging
import os
from pathlib import Path
from typing import Literal

logger = logging.getLogger(__name__)

Visibility = Literal["public", "private"]

_FILE_MODES = {"public": 0o644, "private": 0o600}


class LocalBlobStore:
    """Writes blobs to ``<root>/<prefix>/<key>``, overwriting on repeated keys."""

    def __init__(self, root: str | Path, prefix: str = "public/appliances"):
        self.root = Path(root)
        self.directory = self.root / prefix

    def path_for(self, key: str) -> Path:
        if not key or key in (".", "..") or "/" in key or "\\" in key:
            raise ValueError(f"Invalid blob key {key!r}.")
        return self.directory / key

    def put(self, key: str, data: bytes, visibility: Visibility = "public") -> Path:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        os.chmod(path, _FILE_MODES[visibility])
        logger.debug("Storage: wrote %d bytes to %s", len(data), path)
        return path

    def get(self, key: str) -> bytes:
        return self.path_for(key).read_bytes()
