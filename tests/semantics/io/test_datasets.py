"""
Semantic test: dataset loading.

Invariant:
Keys are sorted and deduplicated before being turned into gaps; binary
files honour their size header and reject truncated payloads.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from index_effectiveness.core.domain.errors import InvalidParameter
from index_effectiveness.simulation.io.datasets import (
    load_gaps,
    read_dataset_binary,
    sort_and_replace_with_gaps,
)


def test_text_dataset_to_gaps(tmp_path: Path) -> None:
    path = tmp_path / "keys.txt"
    path.write_text("5\n1\n3\n3\n10\n", encoding="utf-8")

    gaps = load_gaps(path, binary=False)

    assert gaps.tolist() == [2.0, 2.0, 5.0]


def test_binary_dataset_honours_header(tmp_path: Path) -> None:
    path = tmp_path / "keys.bin"
    np.array([3, 10, 2, 7, 999], dtype="<u8").tofile(path)

    keys = read_dataset_binary(path)
    gaps = load_gaps(path, binary=True)

    assert keys.tolist() == [10, 2, 7]
    assert gaps.tolist() == [5.0, 3.0]


def test_truncated_binary_dataset_rejected(tmp_path: Path) -> None:
    path = tmp_path / "short.bin"
    np.array([5, 1, 2], dtype="<u8").tofile(path)

    with pytest.raises(InvalidParameter):
        read_dataset_binary(path)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_gaps(tmp_path / "nope.txt", binary=False)


def test_fewer_than_two_distinct_keys_has_no_gaps() -> None:
    assert sort_and_replace_with_gaps(np.array([4, 4, 4], dtype=np.uint64)).size == 0
