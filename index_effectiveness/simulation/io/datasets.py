"""Readers for key datasets stored on disk."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from index_effectiveness.core.domain.errors import InvalidParameter

_KEY_DTYPE = np.dtype("<u8")


def read_dataset_text(path: Path) -> np.ndarray:
    """Read unsigned 64-bit keys stored one per line."""
    if not path.exists():
        raise FileNotFoundError(path)
    return np.loadtxt(path, dtype=np.uint64, ndmin=1)


def read_dataset_binary(path: Path, *, first_is_size: bool = True) -> np.ndarray:
    """Read little-endian unsigned 64-bit keys.

    With ``first_is_size`` the first word holds the number of keys that
    follow; otherwise the whole file is keys.
    """
    if not path.exists():
        raise FileNotFoundError(path)

    raw = np.fromfile(path, dtype=_KEY_DTYPE)
    if not first_is_size:
        return raw

    if raw.size == 0:
        raise InvalidParameter(f"{path}: missing size header")

    size = int(raw[0])
    if size > raw.size - 1:
        raise InvalidParameter(
            f"{path}: header announces {size} keys but file holds {raw.size - 1}"
        )
    return raw[1 : size + 1]


def sort_and_replace_with_gaps(keys: np.ndarray) -> np.ndarray:
    """Sort and deduplicate keys, then return the gaps between neighbours."""
    unique = np.unique(keys)
    if unique.size < 2:
        return np.empty(0, dtype=np.float64)
    return np.diff(unique).astype(np.float64)


def load_gaps(path: Path, *, binary: bool) -> np.ndarray:
    keys = read_dataset_binary(path) if binary else read_dataset_text(path)
    return sort_and_replace_with_gaps(keys)
