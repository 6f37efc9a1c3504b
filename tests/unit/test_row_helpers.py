from datetime import datetime

from app.utils.row_helpers import (
    as_flag, as_float, as_int, as_str, format_version, group_rows, map_groups, parse_row_id, parse_version
)


class TestGroupRows:
    def test_single_key_keeps_row_order(self):
        rows = [{"order_id": 1, "n": "a"}, {"order_id": 2, "n": "b"}, {"order_id": 1, "n": "c"}]
        grouped = group_rows(rows, "order_id")
        assert [r["n"] for r in grouped[1]] == ["a", "c"]
        assert [r["n"] for r in grouped[2]] == ["b"]

    def test_composite_key(self):
        rows = [{"a": 1, "b": 2}, {"a": 1, "b": 3}]
        grouped = group_rows(rows, "a", "b")
        assert set(grouped) == {(1, 2), (1, 3)}

    def test_map_groups(self):
        grouped = group_rows([{"k": 1, "v": 2}, {"k": 1, "v": 3}], "k")
        assert map_groups(grouped, lambda row: row["v"] * 10) == {1: [20, 30]}


class TestCoercions:
    def test_flags(self):
        assert as_flag(None) == 0
        assert as_flag(False) == 0
        assert as_flag(True) == 1
        assert as_flag(3) == 1

    def test_numbers(self):
        assert as_int(None) == 0
        assert as_int(None, default=1) == 1
        assert as_int("4") == 4
        assert as_float(None) == 0.0
        assert as_float(2) == 2.0

    def test_strings(self):
        assert as_str(None) == ""
        assert as_str(12) == "12"


class TestVersions:
    def test_format_drops_sub_seconds(self):
        assert format_version(datetime(2024, 5, 10, 8, 30, 15, 999)) == "2024-05-10 08:30:15"
        assert format_version(None) is None

    def test_parse(self):
        assert parse_version("2024-05-10 08:30:15") == datetime(2024, 5, 10, 8, 30, 15)
        assert parse_version(" 2024-05-10 08:30:15 ") == datetime(2024, 5, 10, 8, 30, 15)

    def test_unparseable(self):
        assert parse_version(None) is None
        assert parse_version("") is None
        assert parse_version("yesterday") is None


class TestParseRowId:
    def test_valid_ids(self):
        assert parse_row_id("42") == 42
        assert parse_row_id(7) == 7
        assert parse_row_id(2 ** 31 - 1) == 2 ** 31 - 1

    def test_ids_no_row_can_carry(self):
        for value in ("abc", None, "", "1.5", 0, -5, 2 ** 31, "99999999999999999999"):
            assert parse_row_id(value) is None
