from __future__ import annotations

import operator

import numpy as np
import pandas as pd
import pytest
from partgraph.errors import (
    ChunkLengthMismatchError,
    KeyExtractionError,
    ZipLengthWarning,
)
from partgraph.runtime.sequential import (
    elements,
    filter_seq,
    foreach_seq,
    map_seq,
    mapreduce_seq,
    mapreducebykey_seq,
    reducebykey_seq,
)


def test_elements_of_supported_chunks(sample_frame: pd.DataFrame) -> None:
    assert elements([1, 2]) == [1, 2]
    assert elements(np.arange(4).reshape(2, 2)) == [0, 1, 2, 3]
    assert elements(pd.Series([3, 4])) == [3, 4]
    rows = elements(sample_frame[["user_id", "qty"]])
    assert rows == [(1, 2), (2, 3), (1, 5), (3, 1)]
    assert elements({"a": 1}.items()) == [("a", 1)]


def test_elements_walk_the_cut_axis_first() -> None:
    matrix = np.arange(6).reshape(2, 3)
    assert elements(matrix, axis=1) == [0, 3, 1, 4, 2, 5]
    assert elements(matrix[:, :2], axis=1) + elements(matrix[:, 2:], axis=1) == (
        elements(matrix, axis=1)
    )
    np.testing.assert_array_equal(
        filter_seq(lambda x: x > 2, matrix, axis=1), np.array([3, 4, 5])
    )
    np.testing.assert_array_equal(
        map_seq(lambda x: x + 1, matrix, axes=(1,)), matrix + 1
    )
    assert mapreduce_seq(str, operator.add, "", matrix, axes=(1,)) == "031425"


def test_foreach_seq_visits_zipped_elements_in_order() -> None:
    seen: list[tuple[int, str]] = []
    result = foreach_seq(lambda a, b: seen.append((a, b)), [1, 2, 3], ["x", "y", "z"])
    assert result is None
    assert seen == [(1, "x"), (2, "y"), (3, "z")]


def test_zipped_length_mismatch_raises() -> None:
    with pytest.raises(ChunkLengthMismatchError) as excinfo:
        foreach_seq(lambda a, b: None, [1, 2, 3], ["x"])
    assert excinfo.value.lengths == (3, 1)
    with pytest.raises(ValueError):
        map_seq(operator.add, [1], [1, 2])


def test_zipped_length_mismatch_warns_when_lenient(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("PARTGRAPH_STRICT_ZIP", "0")
    with pytest.warns(ZipLengthWarning):
        assert map_seq(operator.add, [1, 2, 3], [10, 20]) == [11, 22]


def test_map_seq_output_follows_first_chunk() -> None:
    assert map_seq(lambda x: x * 2, [1, 2]) == [2, 4]

    matrix = np.arange(6).reshape(2, 3)
    mapped = map_seq(lambda x: x + 1, matrix)
    assert isinstance(mapped, np.ndarray)
    np.testing.assert_array_equal(mapped, matrix + 1)

    series = pd.Series([1, 2], index=["a", "b"], name="n")
    pd.testing.assert_series_equal(map_seq(lambda x: x * 10, series), series * 10)

    frame = pd.DataFrame({"a": [1, 2], "b": [3, 4]}, index=[5, 6])
    sums = map_seq(lambda row: row[0] + row[1], frame)
    assert list(sums.index) == [5, 6]
    assert sums.tolist() == [4, 6]


def test_map_seq_zips_multiple_inputs() -> None:
    assert map_seq(lambda a, b: a * b, [1, 2, 3], np.array([4, 5, 6])) == [4, 10, 18]


def test_filter_seq_preserves_order_and_container() -> None:
    assert filter_seq(lambda x: x % 2 == 0, [4, 1, 2, 3]) == [4, 2]
    np.testing.assert_array_equal(
        filter_seq(lambda x: x > 2, np.array([3, 1, 4, 1, 5])), np.array([3, 4, 5])
    )
    series = pd.Series([1, 5, 2], index=["a", "b", "c"])
    pd.testing.assert_series_equal(
        filter_seq(lambda x: x > 1, series), series.iloc[[1, 2]]
    )
    frame = pd.DataFrame({"k": ["a", "b", "c"], "v": [1, 2, 3]})
    kept = filter_seq(lambda row: row[1] != 2, frame)
    assert kept["k"].tolist() == ["a", "c"]
    assert filter_seq(bool, []) == []


def test_mapreduce_seq_folds_left_from_seed() -> None:
    assert mapreduce_seq(lambda x: x, operator.add, 0, [1, 2, 3]) == 6
    assert mapreduce_seq(str, operator.add, ">", [1, 2, 3]) == ">123"
    assert mapreduce_seq(lambda a, b: a * b, operator.add, 0, [1, 2], [3, 4]) == 11
    assert mapreduce_seq(abs, operator.add, 42, []) == 42


def test_mapreducebykey_seq_seeds_each_key() -> None:
    result = mapreducebykey_seq(lambda x: (x % 2, x), operator.add, 10, [1, 2, 3, 4])
    assert result == {1: 14, 0: 16}


def test_mapreducebykey_seq_updates_given_accumulator() -> None:
    acc = {"a": 5}
    returned = reducebykey_seq(operator.add, 0, [("a", 1), ("b", 2)], acc)
    assert returned is acc
    assert acc == {"a": 6, "b": 2}


def test_reducebykey_seq_merges_mappings() -> None:
    merged = reducebykey_seq(operator.add, 0, {"a": 4, "b": 1}.items(), {"a": 1})
    assert merged == {"a": 5, "b": 1}


@pytest.mark.parametrize(
    "bad", [[1, 2], [("a", 1, 2)], [None], ["ab"], [b"xy"], [{"k", "v"}]]
)
def test_key_extraction_requires_pairs(bad) -> None:
    with pytest.raises(KeyExtractionError):
        reducebykey_seq(operator.add, 0, bad)
