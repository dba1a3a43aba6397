from __future__ import annotations

from binrel.core.structured import as_str_dict, get_float, get_str, get_str_list, get_table


def test_get_str_strips_and_rejects_blank() -> None:
    table: dict[str, object] = {"a": "  x ", "b": "   ", "c": 3}
    assert get_str(table, "a") == "x"
    assert get_str(table, "b") is None
    assert get_str(table, "c") is None
    assert get_str(table, "missing") is None


def test_get_float_accepts_int_rejects_bool() -> None:
    table: dict[str, object] = {"i": 5, "f": 2.5, "b": True, "s": "1"}
    assert get_float(table, "i") == 5.0
    assert get_float(table, "f") == 2.5
    assert get_float(table, "b") is None
    assert get_float(table, "s") is None


def test_get_table() -> None:
    table: dict[str, object] = {"t": {"k": 1}, "n": 3}
    assert get_table(table, "t") == {"k": 1}
    assert get_table(table, "n") is None


def test_as_str_dict_rejects_non_string_keys() -> None:
    assert as_str_dict({1: "a"}) is None
    assert as_str_dict([]) is None


def test_get_str_list_from_list_or_string() -> None:
    table: dict[str, object] = {
        "list": ["yarn", "build"],
        "string": "yarn  binary-build --platform {platform}",
        "empty": [],
        "mixed": ["yarn", 1],
    }
    assert get_str_list(table, "list") == ("yarn", "build")
    assert get_str_list(table, "string") == ("yarn", "binary-build", "--platform", "{platform}")
    assert get_str_list(table, "empty") is None
    assert get_str_list(table, "mixed") is None
    assert get_str_list(table, "missing") is None
