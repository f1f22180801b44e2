"""Tests for free-name analysis."""

import pytest

from extfmt.ast import parse
from extfmt.compiler import check_bindings, free_names
from extfmt.exceptions import MissingBindingError


def test_free_names_in_first_use_order():
    assert free_names(parse("$b $a $b @c")) == ["b", "a", "c"]


def test_literal_template_has_no_free_names():
    assert free_names(parse("plain text")) == []


def test_alias_is_not_free():
    assert free_names(parse("${number:n} $n")) == ["number"]


def test_discard_alias_binds_nothing():
    assert free_names(parse("@{x:_} $_")) == ["x", "_"]


def test_group_lanes_are_free():
    assert free_names(parse("$($xs $ys),*")) == ["xs", "ys"]


def test_lane_alias_is_not_free():
    assert free_names(parse("$(@{rows:row}$($row),*)(;)*")) == ["rows"]


def test_outer_lane_name_is_bound_inside_nested_group():
    assert free_names(parse("$(@rows$($rows $labels),*)*")) == ["rows", "labels"]


def test_alias_bound_inside_group_does_not_escape():
    assert free_names(parse("$(${xs:v})* $v")) == ["xs", "v"]


def test_name_bound_before_group_is_not_free_inside():
    assert free_names(parse("@{items:all}$($all),*")) == ["items"]


def test_check_bindings_passes():
    check_bindings(parse("$a $($bs)*"), {"a": 1, "bs": [1]})


def test_check_bindings_lists_every_missing_name():
    with pytest.raises(MissingBindingError) as excinfo:
        check_bindings(parse("$a $b $($c $a)*"), {"a": 1})
    assert excinfo.value.names == ["b", "c"]
    assert "'b', 'c'" in str(excinfo.value)
