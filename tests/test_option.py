"""Tests for option specs, bound values and rendering."""

import pytest

from optout.errors import OptionRequired
from optout.option import (
    BoundOption,
    OptionSpec,
    Quoting,
    key_name,
    quote,
)


def spec(switch="-x", **kwargs):
    return OptionSpec(key="x", switch=switch, **kwargs)


# ---------- Flags and switches ----------


def test_true_renders_bare_switch():
    opt = spec().bind(True)
    assert opt.to_argv() == ["-x"]
    assert opt.to_shell() == "-x"


@pytest.mark.parametrize("value", [None, False, ""])
def test_empty_values_render_nothing(value):
    opt = spec().bind(value)
    assert opt.is_empty
    assert opt.to_argv() == []
    assert opt.to_shell() == ""


def test_switch_with_value_quotes_value_only():
    opt = spec().bind(123)
    assert opt.to_argv() == ["-x", "123"]
    assert opt.to_shell() == "-x '123'"


def test_value_without_switch_is_still_quoted():
    opt = spec(switch=None).bind("123")
    assert opt.to_argv() == ["123"]
    assert opt.to_shell() == "'123'"


def test_default_used_when_value_missing():
    s = spec(default=69)
    assert s.bind().to_shell() == "-x '69'"
    assert s.bind(123).to_shell() == "-x '123'"
    assert s.bind("").to_argv() == ["-x", "69"]


# ---------- Separators ----------


def test_non_blank_separator_joins_switch_and_value():
    opt = spec(separator="=").bind("v")
    assert opt.to_argv() == ["-x=v"]
    assert opt.to_shell() == "-x='v'"


def test_empty_separator_concatenates():
    opt = spec(switch="--prefix=", separator="").bind("/usr/lib")
    assert opt.to_argv() == ["--prefix=/usr/lib"]
    assert opt.to_shell() == "--prefix='/usr/lib'"


def test_whitespace_separator_keeps_tokens_apart():
    opt = spec(separator="\t").bind("v")
    assert opt.to_argv() == ["-x", "v"]
    assert opt.to_shell() == "-x\t'v'"


def test_separator_ignored_for_bare_flag():
    assert spec(separator="=").bind(True).to_argv() == ["-x"]


# ---------- Multiple values ----------


def test_list_values_are_joined_with_comma():
    opt = spec().bind(["A", "B", "C"])
    assert opt.to_argv() == ["-x", "A,B,C"]
    assert opt.to_shell() == "-x 'A,B,C'"


def test_list_values_joined_with_custom_string():
    opt = spec(multiple=":").bind(["A", "B", "C"])
    assert opt.to_argv() == ["-x", "A:B:C"]


def test_generator_is_read_once():
    opt = spec(multiple=True).bind(str(n) for n in range(3))
    assert opt.values == ["0", "1", "2"]
    assert opt.to_argv() == ["-x", "0,1,2"]
    assert opt.to_argv() == ["-x", "0,1,2"]


def test_empty_list_is_empty():
    assert spec().bind([]).is_empty


def test_tuple_value_is_kept():
    opt = spec().bind(("a", "b"))
    assert opt.value == ("a", "b")
    assert opt.values == ["a", "b"]


# ---------- Normalization and quoting ----------


def test_surrounding_whitespace_is_stripped():
    assert spec().bind(" a ").to_shell() == "-x 'a'"
    assert spec().bind("   ").is_empty


def test_whitespace_only_value_fails_required_check():
    with pytest.raises(OptionRequired, match="option required: 'x'"):
        spec(required=True).bind("   ").validate()


def test_inner_spaces_are_quoted():
    assert spec().bind("a b c").to_shell() == "-x 'a b c'"
    assert spec().bind("a b c").to_argv() == ["-x", "a b c"]


def test_embedded_single_quotes_are_escaped():
    value = "' a'b'c '"
    opt = spec(switch=None).bind(value)
    assert opt.to_shell() == r"''\'' a'\''b'\''c '\'''"
    assert opt.to_argv() == [value]


def test_windows_quoting_uses_double_quotes():
    assert spec().bind("a b").to_shell(Quoting.WINDOWS) == '-x "a b"'
    assert quote("a b", "windows") == '"a b"'


def test_zero_is_not_empty():
    opt = spec().bind(0)
    assert not opt.is_empty
    assert opt.to_argv() == ["-x", "0"]


def test_native_quoting_follows_os(monkeypatch):
    monkeypatch.setattr("optout.option.os.name", "nt")
    assert Quoting.native() is Quoting.WINDOWS
    monkeypatch.setattr("optout.option.os.name", "posix")
    assert Quoting.native() is Quoting.POSIX


# ---------- Keys ----------


def test_key_name_accepts_enums():
    import enum

    class Opt(enum.Enum):
        SIZE = "size"
        COUNT = 3

    assert key_name("size") == "size"
    assert key_name(Opt.SIZE) == "size"
    assert key_name(Opt.COUNT) == "COUNT"


def test_bound_option_exposes_spec_fields():
    s = spec(index=4)
    opt = BoundOption(s, "v")
    assert opt.key == "x"
    assert opt.index == 4
    assert opt.switch == "-x"
    assert "BoundOption" in repr(opt)
