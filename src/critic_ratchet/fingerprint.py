# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Content fingerprints used to skip re-analysis of unchanged files."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Final

CHUNK_SIZE: Final[int] = 64 * 1024


def compute_fingerprint(path: Path) -> str:
    """Return the hex-encoded SHA-256 digest of the bytes stored at ``path``.

    Args:
        path: File whose content should be fingerprinted.

    Returns:
        str: Digest that only depends on the file content.

    Raises:
        OSError: If the file cannot be opened or fully read.
    """

    hasher = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


__all__ = ["compute_fingerprint"]
