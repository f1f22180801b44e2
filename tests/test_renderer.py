"""Tests for the renderer, lane planning and scopes."""

import threading

import pytest

from extfmt.ast import Group, HiddenVariable, Literal, Variable, group, parse
from extfmt.compiler import Renderer, Scope, is_sequence, plan_lanes, render
from extfmt.compiler.lanes import Lane, lane_key
from extfmt.config import LengthPolicy, RenderOptions
from extfmt.exceptions import (
    LaneLengthMismatchError,
    MissingBindingError,
    NestingTooDeepError,
    RenderError,
    TypeMismatchError,
)


def run(source, **env):
    return render(parse(source), env)


class CountingList(list):
    """List that records which indices were read."""

    def __init__(self, *args):
        super().__init__(*args)
        self.visited = []

    def __getitem__(self, index):
        self.visited.append(index)
        return super().__getitem__(index)


# =============================================================================
# Lane planning
# =============================================================================


def test_lanes_are_deduplicated_in_first_use_order():
    children = (Variable("b"), Variable("a"), HiddenVariable("b"), Variable("a"))
    assert plan_lanes(children, 1) == [
        Lane("b", lane_key("b", 1), False),
        Lane("a", lane_key("a", 1), False),
    ]


def test_lanes_skip_nested_groups():
    children = (Variable("a"), group([Variable("b")]))
    assert [lane.name for lane in plan_lanes(children, 1)] == ["a"]


def test_explicit_alias_is_lane_key():
    children = (HiddenVariable("numbers", "number"), Variable("number"))
    assert plan_lanes(children, 1) == [Lane("numbers", "number", True)]


def test_discard_alias_gets_generated_key():
    [lane] = plan_lanes((HiddenVariable("xs", "_"),), 2)
    assert lane == Lane("xs", lane_key("xs", 2), False)


def test_lanes_cannot_share_an_explicit_alias():
    children = (Variable("xs", "x"), HiddenVariable("ys", "x"))
    with pytest.raises(RenderError, match="'x'"):
        plan_lanes(children, 1)


def test_explicit_alias_cannot_take_earlier_lane_name():
    children = (Variable("ys"), HiddenVariable("xs", "ys"))
    with pytest.raises(RenderError, match="clashes"):
        plan_lanes(children, 1)


def test_alias_may_repeat_own_name():
    children = (HiddenVariable("xs", "xs"), Variable("xs"))
    assert plan_lanes(children, 1) == [Lane("xs", "xs", True)]


def test_generated_keys_cannot_clash_with_identifiers():
    key = lane_key("items", 1)
    # the separator ends an identifier, so no template name can equal a key
    assert parse("$" + key) == [Variable("items"), Literal(key[len("items") :])]


# =============================================================================
# Scope
# =============================================================================


def test_scope_does_not_modify_env():
    env = {"a": 1}
    scope = Scope.root(env)
    scope.bind("a", 2)
    assert scope.resolve("a") == 2
    assert env == {"a": 1}


def test_child_scope_writes_are_local():
    scope = Scope.root({"a": 1})
    child = scope.child()
    child.bind("a", 5)
    child.alias("b", "a")
    assert child.resolve("b") == 5
    assert scope.resolve("a") == 1
    with pytest.raises(MissingBindingError):
        scope.resolve("b")


def test_is_sequence():
    assert is_sequence([1, 2])
    assert is_sequence((1, 2))
    assert is_sequence(range(3))
    assert not is_sequence("abc")
    assert not is_sequence(b"abc")
    assert not is_sequence(42)
    assert not is_sequence({1, 2})


# =============================================================================
# Basic rendering
# =============================================================================


def test_literal_only():
    assert run("no variables here") == "no variables here"


def test_scalar_variable():
    assert run("Hello, $name!", name="Alice") == "Hello, Alice!"


def test_scalar_display_forms():
    assert run("$a $b $c $d", a=1.5, b=True, c=None, d=-3) == "1.5 True None -3"


def test_variable_alias_binds_for_later_siblings():
    assert run("Number: ${number:n} $n $n", number=42) == "Number: 42 42 42"


def test_hidden_variable_emits_nothing():
    assert run("[@secret]", secret="xyz") == "[]"


def test_hidden_variable_alias_binds():
    assert run("@{value:v}<$v>", value=7) == "<7>"


def test_hidden_discard_alias_binds_nothing():
    with pytest.raises(MissingBindingError):
        run("@{value:_}$_", value=7)


def test_hidden_variable_must_be_bound():
    with pytest.raises(MissingBindingError):
        run("@ghost")


def test_render_accepts_initial_aliases():
    nodes = parse("$shown")
    assert Renderer().render(nodes, {"real": "ok"}, aliases={"shown": "real"}) == "ok"


# =============================================================================
# Groups
# =============================================================================


def test_basic_repetition():
    assert run("Numbers: $($numbers),*", numbers=[1, 2, 3]) == "Numbers: 1,2,3"


def test_string_separator():
    assert run("$($xs)( | )*", xs=["a", "b", "c"]) == "a | b | c"


def test_no_separator():
    assert run("$($xs)*", xs=["a", "b", "c"]) == "abc"


def test_zipped_variables():
    out = run("Profiles:\n$($names $ages)\n*", names=["Alice", "Bob"], ages=[30, 40])
    assert out == "Profiles:\nAlice 30\nBob 40"


def test_zip_stops_at_shortest_lane():
    out = run(
        "Items:\n$(@counter $items)\n*",
        counter=[1, 2],
        items=["apple", "banana", "cherry"],
    )
    assert out == "Items:\n apple\n banana"


def test_excess_elements_are_never_visited():
    longer = CountingList(["a", "b", "c", "d", "e"])
    out = run("$($short$long)*", short=[1, 2], long=longer)
    assert out == "1a2b"
    assert longer.visited == [0, 1]


@pytest.mark.parametrize("n", [0, 1, 2, 5])
def test_separator_count(n):
    out = run("$($xs)(<>)*", xs=list(range(n)))
    assert out.count("<>") == max(n - 1, 0)


def test_empty_lane_renders_nothing():
    assert run("[$($xs),*]", xs=[]) == "[]"


def test_empty_lane_wins_over_long_lane():
    assert run("[$($xs $ys),*]", xs=[], ys=[1, 2, 3]) == "[]"


def test_repeated_reference_reuses_lane():
    out = run("$($word=$word)( )*", word=["a", "b"])
    assert out == "a=a b=b"


def test_named_iteration_variable():
    out = run("Numbers: $(@{numbers:number} $number),*", numbers=[1, 2, 3])
    assert out == "Numbers:  1, 2, 3"


def test_lane_alias_also_reachable_by_iterated_name():
    out = run("$(@{xs:x}$x/$xs)( )*", xs=[1, 2])
    assert out == "1/1 2/2"


def test_strings_are_scalars_not_lanes():
    with pytest.raises(TypeMismatchError) as excinfo:
        run("$($word)*", word="abc")
    assert excinfo.value.name == "word"
    assert excinfo.value.expected == "sequence"


def test_tuple_and_range_lanes():
    assert run("$($a$b),*", a=(1, 2, 3), b=range(10, 13)) == "110,211,312"


def test_sequence_emitted_as_scalar_is_type_mismatch():
    with pytest.raises(TypeMismatchError) as excinfo:
        run("$xs", xs=[1, 2])
    assert excinfo.value.expected == "scalar"
    assert excinfo.value.actual == "list"


def test_missing_lane_binding():
    with pytest.raises(MissingBindingError) as excinfo:
        run("$($xs $ys),*", xs=[1])
    assert excinfo.value.names == ["ys"]


@pytest.mark.parametrize("source", ["$(${xs:x}@{ys:x})*", "$($ys@{xs:ys})( )*"])
def test_clashing_lane_aliases_are_render_errors(source):
    with pytest.raises(RenderError):
        run(source, xs=[1, 2], ys=["a", "b"])


def test_group_without_variables_is_render_error():
    with pytest.raises(RenderError):
        run("$(just text)*")


def test_scalar_referenced_in_group_is_a_lane():
    nodes = [
        group(
            [
                Variable("prefix"),
                Literal("-"),
                HiddenVariable("xs", "x"),
                Variable("x"),
            ]
        ),
    ]
    with pytest.raises(TypeMismatchError) as excinfo:
        render(nodes, {"prefix": "p", "xs": [1, 2]})
    assert excinfo.value.name == "prefix"


def test_top_level_alias_can_be_iterated():
    assert run("@{items:all}$($all),*", items=[1, 2]) == "1,2"


# =============================================================================
# Nesting and shadowing
# =============================================================================


def test_nested_repetitions():
    out = run(
        "Matrix:\n$(@{matrix:row}$($row) *)(\n)*",
        matrix=[[1, 2, 3], [4, 5, 6], [7, 8, 9]],
    )
    assert out == "Matrix:\n1 2 3\n4 5 6\n7 8 9"


def test_nested_group_sees_outer_lane_by_name():
    """A name iterated by an outer group refers to the current element inside."""
    out = run("$(@rows[$($rows),*])( )*", rows=[[1, 2], [3]])
    assert out == "[1,2] [3]"


def test_nested_group_zips_outer_element_with_env_sequence():
    out = run(
        "$(@{groups:g}$($g=$labels)(,)*)(;)*",
        groups=[[1, 2, 3], [4]],
        labels=["a", "b"],
    )
    assert out == "1=a,2=b;4=a"


def test_alias_bound_in_group_does_not_leak():
    nodes = parse("$(${xs:v})*|$v")
    with pytest.raises(MissingBindingError):
        render(nodes, {"xs": [1, 2]})


def test_shadowing_restores_outer_binding():
    out = run("${name:v}:$(${items:v}$v)*:$v", name="outer", items=["a", "b"])
    assert out == "outer:aabb:outer"


def test_same_name_at_two_depths():
    out = run("$(@xs$($xs)(+)*)(|)*", xs=[["a", "b"], ["c"]])
    assert out == "a+b|c"


def test_deep_zero_length_propagation():
    """An empty innermost lane at depth 4 renders nothing there, but outer
    iterations and separators still run."""
    data = [[[[], [1]], [[2, 3]]], [[[]]]]
    out = run(
        "$(@{a:b}<$(@{b:c}($(@{c:d}[$($d)(,)*])*))(;)*>)(|)*",
        a=data,
    )
    assert out == "<([][1]);([2,3])>|<([])>"


def test_zero_length_outer_lane_skips_everything_inside():
    out = run("<$(@xs$($ys)*$($zs)*)*>", xs=[], ys=None, zs=None)
    assert out == "<>"


def test_zero_length_at_depth_three_with_separators():
    out = run("$(@a$(@a$($a)(,)*)(;)*)(|)*", a=[[[], []], [[1]]])
    assert out == ";|1"


# =============================================================================
# Options
# =============================================================================


def test_strict_policy_rejects_unequal_lengths():
    renderer = Renderer(RenderOptions(length_policy=LengthPolicy.STRICT))
    with pytest.raises(LaneLengthMismatchError) as excinfo:
        renderer.render(parse("$($a$b)*"), {"a": [1, 2], "b": [1]})
    assert excinfo.value.lengths == {"a": 2, "b": 1}


def test_strict_policy_allows_equal_lengths():
    renderer = Renderer(RenderOptions(length_policy="strict"))
    env = {"a": [1, 2], "b": ["x", "y"]}
    assert renderer.render(parse("$($a$b),*"), env) == "1x,2y"


def test_truncate_policy_logs(caplog):
    with caplog.at_level("DEBUG", logger="extfmt"):
        run("$($a$b)*", a=[1, 2], b=[1])
    assert "Truncating group to 1 iterations" in caplog.text


def test_renderer_depth_limit_on_hand_built_tree():
    node = Variable("x")
    for _ in range(5):
        node = Group((HiddenVariable("x"), node), None)
    renderer = Renderer(RenderOptions(max_depth=3))
    with pytest.raises(NestingTooDeepError):
        renderer.render([node], {"x": [[[[[1]]]]]})


def test_concurrent_renders_do_not_interfere():
    nodes = parse("$(@{xs:x}$x$(@{ys:y}$y)*)(,)*")
    renderer = Renderer()
    results = {}

    def work(i):
        env = {"xs": [i] * 50, "ys": [str(i)] * 3}
        results[i] = renderer.render(nodes, env)

    threads = [threading.Thread(target=work, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    for i in range(8):
        assert results[i] == ",".join([f"{i}{i}{i}{i}"] * 50)
