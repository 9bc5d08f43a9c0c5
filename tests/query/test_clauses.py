"""Tests for conditions, raw SQL fragments and ORDER BY clauses."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest

from accessdb.dialect import get_dialect
from accessdb.errors import QueryCompositionError
from accessdb.query import (
    Ascending,
    Column,
    Descending,
    Equals,
    GreaterThan,
    In,
    IsNotNull,
    IsNull,
    LessThanOrEquals,
    Multiple,
    MultipleOr,
    NotEquals,
    NotIn,
    Random,
    Raw,
    Relation,
    Select,
    Verbatim,
)
from accessdb.query.clauses import Clause
from accessdb.query.compiler import Compiler


def compile_clause(clause: Clause, dialect: str = "mysql") -> tuple[str, dict[str, Any]]:
    compiler = Compiler(get_dialect(dialect))
    sql = clause.compile(compiler.section("w"))
    return sql, compiler.values


# =========================================================================
# Typed comparisons
# =========================================================================


class TestComparison:
    def test_equals(self) -> None:
        assert compile_clause(Equals("p.id", 1)) == ("`p`.`id` = :w0", {"w0": 1})

    def test_sqlite_escaping(self) -> None:
        assert compile_clause(GreaterThan("p.id", 1), "sqlite") == ('"p"."id" > :w0', {"w0": 1})

    def test_operators(self) -> None:
        assert compile_clause(NotEquals("a", 1))[0] == "`a` != :w0"
        assert compile_clause(LessThanOrEquals("a", 1))[0] == "`a` <= :w0"

    def test_none_becomes_is_null(self) -> None:
        assert compile_clause(Equals("deleted_at", None)) == ("`deleted_at` IS NULL", {})
        assert compile_clause(NotEquals("deleted_at", None)) == ("`deleted_at` IS NOT NULL", {})
        assert compile_clause(IsNull("a"))[0] == "`a` IS NULL"
        assert compile_clause(IsNotNull("a"))[0] == "`a` IS NOT NULL"

    def test_list_becomes_in(self) -> None:
        assert compile_clause(Equals("id", [1, 2])) == (
            "`id` IN (:w0, :w1)",
            {"w0": 1, "w1": 2},
        )
        assert compile_clause(NotEquals("id", (1,)))[0] == "`id` NOT IN (:w0)"

    def test_in_and_not_in(self) -> None:
        assert compile_clause(In("id", [3]))[0] == "`id` IN (:w0)"
        assert compile_clause(NotIn("id", [3, 4]))[0] == "`id` NOT IN (:w0, :w1)"
        assert compile_clause(In("id", 3)) == ("`id` IN (:w0)", {"w0": 3})

    def test_empty_lists(self) -> None:
        assert compile_clause(In("id", [])) == ("1 = 2", {})
        assert compile_clause(NotIn("id", [])) == ("1 = 1", {})

    def test_list_with_ordering_operator_rejected(self) -> None:
        with pytest.raises(QueryCompositionError, match="cannot compare against a list"):
            compile_clause(GreaterThan("id", [1, 2]))

    def test_column_value(self) -> None:
        assert compile_clause(Equals("a.x", Column("b.x")))[0] == "`a`.`x` = `b`.`x`"

    def test_subquery_value(self) -> None:
        sub = Select("users").select("id").where("banned = ?", 1)
        assert compile_clause(In("owner_id", sub)) == (
            "`owner_id` IN (SELECT id FROM `users` WHERE (banned = :z0w0))",
            {"z0w0": 1},
        )

    def test_values_converted(self) -> None:
        _, values = compile_clause(Equals("at", datetime(2024, 1, 2, 3, 4, 5)))
        assert values == {"w0": "2024-01-02 03:04:05"}
        assert compile_clause(Equals("flag", True))[1] == {"w0": 1}

    def test_field_object(self) -> None:
        class Named:
            name = "owner_id"

        assert compile_clause(Equals(Named(), 1))[0] == "`owner_id` = :w0"

    def test_relation(self) -> None:
        assert compile_clause(Relation("p.owner_id", "u.id")) == ("`p`.`owner_id` = `u`.`id`", {})


# =========================================================================
# Raw SQL
# =========================================================================


class TestRaw:
    def test_no_values(self) -> None:
        assert compile_clause(Raw("deleted_at IS NULL")) == ("(deleted_at IS NULL)", {})

    def test_positional(self) -> None:
        assert compile_clause(Raw("a = ? AND b > ?", 1, 2)) == (
            "(a = :w0 AND b > :w1)",
            {"w0": 1, "w1": 2},
        )

    def test_single_value_repeats(self) -> None:
        assert compile_clause(Raw("a = ? OR b = ?", 5)) == (
            "(a = :w0 OR b = :w1)",
            {"w0": 5, "w1": 5},
        )

    def test_list_expands(self) -> None:
        assert compile_clause(Raw("id IN (?)", [1, 2, 3])) == (
            "(id IN (:w0, :w1, :w2))",
            {"w0": 1, "w1": 2, "w2": 3},
        )

    def test_empty_list_under_selects(self) -> None:
        assert compile_clause(Raw("id IN (?)", [])) == ("(1 = 2)", {})

    def test_none_rewrites_comparisons(self) -> None:
        assert compile_clause(Raw("deleted_at = ?", None)) == ("(deleted_at IS NULL)", {})
        assert compile_clause(Raw("deleted_at != ?", None)) == ("(deleted_at IS NOT NULL)", {})
        assert compile_clause(Raw("deleted_at <> ?", None)) == ("(deleted_at IS NOT NULL)", {})

    def test_none_keeps_other_marks(self) -> None:
        assert compile_clause(Raw("coalesce(x, ?) > 1", None)) == (
            "(coalesce(x, :w0) > 1)",
            {"w0": None},
        )

    def test_count_mismatch(self) -> None:
        with pytest.raises(QueryCompositionError, match="2 placeholder"):
            compile_clause(Raw("a = ? AND b = ?", 1, 2, 3))

    @pytest.mark.parametrize("values", [(5,), (1, 2)])
    def test_values_without_marks_rejected(self, values: tuple) -> None:
        with pytest.raises(QueryCompositionError, match="has 0 placeholder"):
            compile_clause(Raw("a = 1", *values))

    def test_where_values_without_marks_rejected(self) -> None:
        with pytest.raises(QueryCompositionError):
            Select("users").where("a = 1", 5).render()

    def test_named_values(self) -> None:
        assert compile_clause(Raw("a = :first OR b IN (:ids)", {"first": 1, "ids": [2, 3]})) == (
            "(a = :w0 OR b IN (:w1, :w2))",
            {"w0": 1, "w1": 2, "w2": 3},
        )

    def test_named_unknown_left_alone(self) -> None:
        assert compile_clause(Raw("a = :known AND b = :other", {"known": 1}))[0] == (
            "(a = :w0 AND b = :other)"
        )

    def test_column_inlined(self) -> None:
        assert compile_clause(Raw("a = ?", Column("p.b"))) == ("(a = `p`.`b`)", {})

    def test_subquery(self) -> None:
        sub = Select("users").select("id").where("role = ?", "admin")
        assert compile_clause(Raw("owner_id IN (?)", sub)) == (
            "(owner_id IN (SELECT id FROM `users` WHERE (role = :z0w0)))",
            {"z0w0": "admin"},
        )


# =========================================================================
# Combinators
# =========================================================================


class TestMultiple:
    def test_and(self) -> None:
        clause = Multiple(Equals("a", 1), Raw("b > ?", 2))
        assert compile_clause(clause) == ("(`a` = :w0 AND (b > :w1))", {"w0": 1, "w1": 2})

    def test_or(self) -> None:
        clause = MultipleOr(Equals("a", 1), Equals("b", 2))
        assert compile_clause(clause)[0] == "(`a` = :w0 OR `b` = :w1)"

    def test_single_part_not_wrapped(self) -> None:
        assert compile_clause(Multiple(Equals("a", 1)))[0] == "`a` = :w0"

    def test_empty(self) -> None:
        assert compile_clause(Multiple()) == ("", {})
        assert compile_clause(Multiple(Multiple(), Equals("a", 1)))[0] == "`a` = :w0"

    def test_nested(self) -> None:
        clause = Multiple(Equals("a", 1), MultipleOr(Equals("b", 2), Equals("c", 3)))
        assert compile_clause(clause)[0] == "(`a` = :w0 AND (`b` = :w1 OR `c` = :w2))"


# =========================================================================
# ORDER BY
# =========================================================================


class TestOrderBy:
    def test_directions(self) -> None:
        assert compile_clause(Ascending("id"))[0] == "id ASC"
        assert compile_clause(Descending(Column("p.id")))[0] == "`p`.`id` DESC"

    def test_random(self) -> None:
        assert compile_clause(Random())[0] == "RAND()"
        assert compile_clause(Random(), "sqlite")[0] == "RANDOM()"

    def test_verbatim(self) -> None:
        assert compile_clause(Verbatim("FIELD(id, ?)", [3, 1])) == (
            "FIELD(id, :w0, :w1)",
            {"w0": 3, "w1": 1},
        )
