"""Unit tests for query composition."""

from __future__ import annotations

import dataclasses
from decimal import Decimal

import pytest

from pitwall.compose.builder import QueryComposer, query
from pitwall.compose.helpers import comment, cond, cond_fn
from pitwall.compose.parameter import Parameter, param
from pitwall.compose.query import Query, placeholder_token
from pitwall.compose.text import canonicalize
from pitwall.errors import (
    ArrayOfUndefined,
    InconsistentArrayTypes,
    InvalidParameter,
    InvalidQueryTemplate,
    UnhandledArrayType,
    UnhandledCase,
)


def test_plain_query():
    q = query("SELECT 1")
    assert q.sql == "SELECT 1"
    assert q.params == ()
    assert q.dump() == "SELECT 1"


def test_query_with_parameter():
    q = query(
        """
        SELECT 1
        WHERE foo = {}
        """,
        param("bar", "bar"),
    )
    assert canonicalize(q.sql) == "SELECT 1 WHERE foo = $1"
    assert canonicalize(q.dump()) == "SELECT 1 WHERE foo = 'bar'"
    assert q.params == (Parameter(name="bar", value="bar", type=""),)
    assert q.values == ("bar",)


def test_named_sql_uses_placeholder_tokens():
    q = query("WHERE foo = {}", param("bar", "bar"))
    assert q.named_parameters_sql == f"WHERE foo = {placeholder_token('bar')}"


def test_multiple_parameters_numbered_in_order():
    q = query(
        """
        SELECT 1
        FROM a
        WHERE x = {x}
        AND y = {y}
        """,
        x=param("x", 1, "Int"),
        y=param("y", "foo"),
    )
    assert canonicalize(q.sql) == "SELECT 1 FROM a WHERE x = $1 AND y = $2"
    assert q.params == (
        Parameter(name="x", value=1, type="Int"),
        Parameter(name="y", value="foo"),
    )


def test_list_of_parameters_expands_in_clause():
    q = query(
        """
        SELECT 1
        FROM a
        WHERE x in ({})
        """,
        param("x", [1, 2, 3], "Int"),
    )
    assert canonicalize(q.sql) == "SELECT 1 FROM a WHERE x in ($1, $2, $3)"
    assert [p.name for p in q.params] == ["x_0", "x_1", "x_2"]
    assert all(p.type == "Int" for p in q.params)
    assert canonicalize(q.dump()) == "SELECT 1 FROM a WHERE x in (1, 2, 3)"


def test_first_parameter_with_a_name_wins():
    q = query("SELECT {}, {}", param("x", 1), param("x", 2))
    assert q.params == (Parameter(name="x", value=1),)
    assert q.sql == "SELECT $1, $1"
    assert q.dump() == "SELECT 1, 1"


def test_conditional_fragments():
    q = query(
        """
        SELECT
          1
          {}
          {}
        FROM
          a
        {}
        {}
        """,
        cond(False)(", 2"),
        cond(True)(", 3"),
        cond(False)(
            """
            INNER
              JOIN b
              ON a.x = b.x
            """
        ),
        cond(True)(
            """
            INNER
              JOIN c
              ON a.x = c.x
            """
        ),
    )
    assert canonicalize(q.sql) == "SELECT 1 , 3 FROM a INNER JOIN c ON a.x = c.x"
    assert q.params == ()


def test_parameters_in_conditions_are_deduplicated():
    q = query(
        """
        SELECT 1
        FROM a
        WHERE x = {x}
        AND y = {y}
        {extra}
        """,
        x=param("x", 1, "Int"),
        y=param("y", "foo"),
        extra=cond(True)("AND z = {}", param("x", 1)),
    )
    assert canonicalize(q.sql) == "SELECT 1 FROM a WHERE x = $1 AND y = $2 AND z = $1"
    assert q.params == (
        Parameter(name="x", value=1, type="Int"),
        Parameter(name="y", value="foo"),
    )
    assert canonicalize(q.dump()) == "SELECT 1 FROM a WHERE x = 1 AND y = 'foo' AND z = 1"


def test_parameters_in_conditions_keep_first_seen_order():
    q = query(
        """
        SELECT 1
        FROM a
        WHERE 1 = 1
        {z}
        AND x = {x}
        AND y = {y}
        """,
        z=cond(True)("AND z = {}", param("z", 1)),
        x=param("x", 1, "Int"),
        y=param("y", "foo"),
    )
    assert canonicalize(q.sql) == "SELECT 1 FROM a WHERE 1 = 1 AND z = $1 AND x = $2 AND y = $3"
    assert [p.name for p in q.params] == ["z", "x", "y"]


def test_disabled_condition_contributes_no_parameters():
    q = query("SELECT 1 {}", cond(False)("AND z = {}", param("z", 1)))
    assert q.sql == "SELECT 1"
    assert q.params == ()


def test_conditional_function():
    is_column_included = cond_fn(lambda column: column == "t")
    q = query(
        """
        SELECT
          1
          {}
          {}
        FROM
          a
        """,
        is_column_included("f")(", 2"),
        is_column_included("t")(", 3"),
    )
    assert canonicalize(q.sql) == "SELECT 1 , 3 FROM a"


def test_nested_queries_and_raw_numbers():
    assert canonicalize(query("select {}", query("1")).debug()) == "select 1"
    assert canonicalize(query("select {}", 2).debug()) == "select 2"
    assert query("select {}", 0).sql == "select 0"
    assert query("select {}", 1.5).sql == "select 1.5"


def test_tagged_template_calling_convention():
    q = query(["select ", ""], query(["1"]))
    assert q.dump() == "select 1"

    q = query(["SELECT * FROM a WHERE x = ", " AND y = ", ""], param("x", 1), param("y", 2))
    assert q.sql == "SELECT * FROM a WHERE x = $1 AND y = $2"


def test_nested_query_parameters_are_renumbered():
    inner = query("x = {}", param("x", 10))
    assert inner.sql == "x = $1"

    outer = query("WHERE y = {} AND {}", param("y", 20), inner)
    assert outer.sql == "WHERE y = $1 AND x = $2"
    assert outer.values == (20, 10)


def test_comment_interpolates_as_nothing():
    q = query(
        """
        SELECT 1
        {}
        """,
        comment("explains the query"),
    )
    assert canonicalize(q.dump()) == "SELECT 1"


def test_list_of_queries_is_concatenated():
    columns = ["a", "b", "c"]
    q = query(
        """
        select
          {}
        """,
        [
            query(
                '\n  {} "{}" {}',
                "," if idx != 0 else "",
                column,
                param(f"{column}_{idx}", idx),
            )
            for idx, column in enumerate(columns)
        ],
    )
    assert canonicalize(q.dump()) == 'select "a" 0 , "b" 1 , "c" 2'
    assert [p.name for p in q.params] == ["a_0", "b_1", "c_2"]


def test_empty_list_interpolates_as_nothing():
    q = query(
        """
        select 1 {}
        """,
        [],
    )
    assert canonicalize(q.dump()) == "select 1"


def test_none_interpolates_as_nothing():
    assert query("select 1{}", None).sql == "select 1"


def test_named_and_indexed_fields():
    q = query("{1} {0} {table}", "b", "a", table="t")
    assert q.sql == "a b t"


def test_escaped_braces_are_literal():
    q = query("SELECT '{{}}'::jsonb, {}", param("x", 1))
    assert q.sql == "SELECT '{}'::jsonb, $1"


def test_array_literal_braces():
    assert query("SELECT '{{1,2,3}}'::int[]").sql == "SELECT '{1,2,3}'::int[]"
    assert query(["SELECT '{1,2,3}'::int[]"]).sql == "SELECT '{1,2,3}'::int[]"

    with pytest.raises(InvalidQueryTemplate):
        query("SELECT '{1,2,3}'::int[]")


def test_dump_handles_ten_or_more_parameters():
    q = query(", ".join(["{}"] * 11), *[param(f"p{i}", i) for i in range(11)])
    assert q.sql.endswith("$10, $11")
    assert q.dump() == "0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10"


def test_dump_quotes_non_numbers():
    q = query(
        "{} {} {} {}",
        param("a", Decimal("1.50")),
        param("b", "text"),
        param("c", True),
        param("d", None),
    )
    assert q.dump() == "1.50 'text' 'True' 'None'"


def test_sql_is_deterministic():
    q = query("x = {} AND y = {}", param("x", 1), param("y", 2))
    assert q.sql == q.sql
    assert Query(q.named_parameters_sql, q.params).sql == q.sql


def test_sql_is_dedented():
    q = query(
        """
            SELECT 1
            FROM a
        """
    )
    assert q.sql == "SELECT 1\nFROM a"


def test_runs_of_blank_lines_collapse():
    q = query("SELECT 1\n\n\n\nFROM a\n\nWHERE 1 = 1")
    assert q.named_parameters_sql == "SELECT 1\n\nFROM a\n\nWHERE 1 = 1"


def test_query_is_immutable():
    q = query("SELECT 1")
    with pytest.raises(dataclasses.FrozenInstanceError):
        q.named_parameters_sql = "DROP TABLE a"  # type: ignore[misc]


def test_composer_is_usable_directly():
    q = QueryComposer().compose(["a = ", ""], [param("a", 1)])
    assert q.sql == "a = $1"


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


def test_param_scalar_and_sequence():
    assert param("x", 1) == Parameter(name="x", value=1, type="")
    assert param("x", (1, 2), "Int") == [
        Parameter(name="x_0", value=1, type="Int"),
        Parameter(name="x_1", value=2, type="Int"),
    ]
    assert param("x", []) == []


@pytest.mark.parametrize("name", ["", None, 3])
def test_param_requires_a_name(name):
    with pytest.raises(InvalidParameter) as exc_info:
        param(name, 1)  # type: ignore[arg-type]
    assert exc_info.value.code == "INVALID_PARAMETER"


# ---------------------------------------------------------------------------
# Composition errors
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "values",
    [
        [query("1"), param("x", 2)],
        [param("x", 2), query("1")],
    ],
)
def test_mixed_list_raises(values):
    with pytest.raises(InconsistentArrayTypes) as exc_info:
        query("SELECT 1 FROM a WHERE x in ({})", values)
    assert exc_info.value.code == "INCONSISTENT_ARRAY_TYPES"


def test_list_of_none_raises():
    with pytest.raises(ArrayOfUndefined) as exc_info:
        query("SELECT 1 FROM a WHERE x in ({})", [None])
    assert exc_info.value.code == "ARRAY_OF_UNDEFINED"


def test_list_of_numbers_raises():
    with pytest.raises(UnhandledArrayType) as exc_info:
        query("SELECT 1 FROM a WHERE x in ({})", [1, 2, 3])
    assert exc_info.value.code == "UNHANDLED_ARRAY_TYPE"
    assert exc_info.value.details["value_type"] == "int"


@pytest.mark.parametrize("value", [{"foo": "bar"}, True, object()])
def test_unhandled_value_raises(value):
    with pytest.raises(UnhandledCase) as exc_info:
        query("SELECT 1 FROM a WHERE x in ({})", value)
    assert exc_info.value.code == "UNHANDLED_CASE"


@pytest.mark.parametrize(
    "args",
    [
        (),
        (None,),
        ([],),
        (["a", "b"],),
        (["a"], 1),
        ([1],),
        ("SELECT {",),
        ("SELECT {missing}",),
        ("SELECT {}",),
        ("SELECT {0!r}", 1),
        ("SELECT {0:>4}", 1),
    ],
)
def test_invalid_templates_raise(args):
    with pytest.raises(InvalidQueryTemplate) as exc_info:
        query(*args)
    assert exc_info.value.code == "INVALID_QUERY_TEMPLATE"


def test_named_values_need_a_str_template():
    with pytest.raises(InvalidQueryTemplate):
        query(["a"], x=1)
