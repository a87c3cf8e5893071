import numpy as np
import pytest

from seqmatch import NestedRunTable, OrderedRunTable, PackedRunTable, make_table
from seqmatch.config import MAX_LOAD_FACTOR, MAX_POSITION


class TestRunTableInterface:
    @pytest.fixture
    def table(self, layout):
        return make_table(layout)

    def test_insert_get_pop(self, table):
        table.insert(0, 3, 1)
        table.insert(1, 4, 2)
        assert len(table) == 2
        assert table.get(1, 4) == 2
        assert table.get(5, 5) == 0

        assert table.pop(0, 3) == 1
        assert table.pop(0, 3) == 0
        assert len(table) == 1
        assert table.get(0, 3) == 0

    def test_insert_overwrites(self, table):
        table.insert(2, 2, 1)
        table.insert(2, 2, 4)
        assert len(table) == 1
        assert table.get(2, 2) == 4

    def test_items_row_major(self, table):
        for row in range(3):
            for col in (1, 5, 9):
                table.insert(row, col, row + 1)
        table.pop(1, 5)
        table.insert(3, 0, 2)
        points = [point for point, _ in table.items()]
        assert points == sorted(points)
        assert len(points) == 9

    def test_prune_keeps_current_row_and_long_runs(self, table):
        table.insert(0, 0, 1)
        table.insert(0, 5, 3)
        table.insert(1, 2, 2)
        table.insert(2, 7, 1)
        removed = table.prune(2, 3)
        assert removed == 2
        assert dict(table.items()) == {(0, 5): 3, (2, 7): 1}
        assert len(table) == 2

    def test_prune_after_out_of_order_inserts(self, table):
        table.insert(2, 7, 1)
        table.insert(0, 0, 1)
        table.insert(1, 9, 1)
        table.insert(1, 3, 4)
        assert table.prune(2, 3) == 2
        assert list(table.items()) == [((1, 3), 4), ((2, 7), 1)]
        assert len(table) == 2

    def test_items_sorted_regardless_of_insertion_order(self, table):
        for row, col in [(3, 1), (0, 9), (3, 0), (1, 2), (0, 4)]:
            table.insert(row, col, 1)
        assert [point for point, _ in table.items()] == [(0, 4), (0, 9), (1, 2), (3, 0), (3, 1)]

    def test_prune_nothing_below_first_row(self, table):
        table.insert(0, 1, 1)
        assert table.prune(0, 5) == 0
        assert len(table) == 1

    def test_unknown_layout(self):
        with pytest.raises(ValueError, match="Unknown layout"):
            make_table("tree")


class TestPackedRunTable:
    def test_pack_round_trip_at_limits(self):
        key = PackedRunTable.pack(MAX_POSITION, MAX_POSITION)
        assert key == np.uint64(0xFFFFFFFEFFFFFFFE)
        assert PackedRunTable.unpack(key) == (MAX_POSITION, MAX_POSITION)

    def test_large_positions(self):
        table = PackedRunTable()
        table.insert(MAX_POSITION, 0, 2)
        table.insert(0, MAX_POSITION, 3)
        assert table.get(MAX_POSITION, 0) == 2
        assert table.get(0, MAX_POSITION) == 3
        assert [point for point, _ in table.items()] == [(0, MAX_POSITION), (MAX_POSITION, 0)]

    def test_overwrite_at_load_limit_does_not_grow(self):
        table = PackedRunTable(buckets=8)
        for col in range(5):
            table.insert(0, col, 1)
        assert table.hash_stats()[1] == 8
        for col in range(5):
            table.insert(0, col, 2)
        assert table.hash_stats() == (5 / 8, 8)
        assert all(table.get(0, col) == 2 for col in range(5))

        table.insert(1, 0, 1)
        assert table.hash_stats()[1] == 16

    def test_grows_under_load(self):
        table = PackedRunTable(buckets=8)
        for i in range(1000):
            table.insert(i, i * 7 % 1000, i + 1)
        load_factor, buckets = table.hash_stats()
        assert len(table) == 1000
        assert buckets & (buckets - 1) == 0
        assert load_factor <= MAX_LOAD_FACTOR
        assert all(table.get(i, i * 7 % 1000) == i + 1 for i in range(1000))

    def test_deletion_keeps_probe_chains(self):
        rng = np.random.default_rng(3)
        table = PackedRunTable(buckets=16)
        expected = {}
        for row, col in rng.integers(0, 50, size=(600, 2)).tolist():
            table.insert(row, col, row + col + 1)
            expected[(row, col)] = row + col + 1

        removed = list(expected)[::2]
        for row, col in removed:
            assert table.pop(row, col) == row + col + 1
            del expected[(row, col)]

        assert len(table) == len(expected)
        assert dict(table.items()) == expected
        assert all(table.get(row, col) == 0 for row, col in removed)

    def test_bucket_rounding(self):
        assert PackedRunTable(buckets=100).hash_stats() == (0.0, 128)
        assert PackedRunTable(buckets=64).hash_stats() == (0.0, 64)


class TestNestedRunTable:
    def test_exhausted_rows_dropped(self):
        table = NestedRunTable()
        table.insert(0, 1, 1)
        table.insert(0, 2, 1)
        table.insert(1, 3, 4)
        table.prune(2, 2)
        assert table.get(0, 1) == 0
        assert dict(table.items()) == {(1, 3): 4}

    def test_pop_last_column_removes_row(self):
        table = NestedRunTable()
        table.insert(4, 4, 1)
        assert table.pop(4, 4) == 1
        assert len(table) == 0
        assert list(table.items()) == []


class TestOrderedRunTable:
    def test_no_hash_stats(self):
        assert OrderedRunTable().hash_stats() == (None, None)
