"""Tests for PrefixSet."""

import pytest

from telebox.core.prefixes import PrefixSet


def test_first_match_wins():
    prefixes = PrefixSet([".", ".."])
    assert prefixes.match("..foo") == "."
    assert prefixes.match("foo") is None
    assert prefixes.main == "."


def test_deduplicates_in_order():
    assert PrefixSet(["!", ".", "!"]).as_list() == ["!", "."]


def test_never_empty():
    with pytest.raises(ValueError):
        PrefixSet([])

    prefixes = PrefixSet(["."])
    with pytest.raises(ValueError):
        prefixes.remove(["."])
    with pytest.raises(ValueError):
        prefixes.replace([""])
    assert prefixes.as_list() == ["."]


def test_add_and_remove():
    prefixes = PrefixSet(["."])
    assert prefixes.add(["!", "."]) == [".", "!"]
    assert prefixes.remove(["."]) == ["!"]
    assert "!" in prefixes
    assert len(prefixes) == 1
