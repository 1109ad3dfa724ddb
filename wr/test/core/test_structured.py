from __future__ import annotations

from wr.core.structured import (
    as_obj_list,
    as_str_dict,
    get_float,
    get_int,
    get_str,
    get_table,
    is_str_dict,
)


def test_is_str_dict() -> None:
    assert is_str_dict({"a": 1})
    assert not is_str_dict({1: "a"})
    assert not is_str_dict(["a"])


def test_as_str_dict_and_list() -> None:
    assert as_str_dict({"a": 1}) == {"a": 1}
    assert as_str_dict("nope") is None
    assert as_obj_list([1, "x"]) == [1, "x"]
    assert as_obj_list({"a": 1}) is None


def test_get_str_strips_and_rejects_blank() -> None:
    table: dict[str, object] = {"a": "  x ", "b": "   ", "c": 3}
    assert get_str(table, "a") == "x"
    assert get_str(table, "b") is None
    assert get_str(table, "c") is None
    assert get_str(table, "missing") is None


def test_get_int_rejects_bool() -> None:
    table: dict[str, object] = {"n": 3, "flag": True, "f": 1.5}
    assert get_int(table, "n") == 3
    assert get_int(table, "flag") is None
    assert get_int(table, "f") is None


def test_get_float_accepts_int() -> None:
    table: dict[str, object] = {"n": 3, "f": 0.5, "flag": False, "s": "1"}
    assert get_float(table, "n") == 3.0
    assert get_float(table, "f") == 0.5
    assert get_float(table, "flag") is None
    assert get_float(table, "s") is None


def test_get_table() -> None:
    table: dict[str, object] = {"deploy": {"staging_job": "x"}, "flat": 1}
    assert get_table(table, "deploy") == {"staging_job": "x"}
    assert get_table(table, "flat") is None
