"""Tests for SELECT and UNION rendering."""

from __future__ import annotations

import re

import pytest

from accessdb.errors import NotSupportedError, QueryCompositionError, UnionMisuseError
from accessdb.query import (
    Equals,
    In,
    Insert,
    PageCursor,
    Raw,
    RawQuery,
    Relation,
    Select,
    Union,
    Update,
)
from accessdb.schema import Table


# =========================================================================
# SELECT
# =========================================================================


class TestSelect:
    def test_default_fields(self) -> None:
        assert Select("users").render() == ("SELECT `users`.* FROM `users`", {})

    def test_sqlite(self) -> None:
        assert Select("users", "u").get_sql("sqlite") == 'SELECT "u".* FROM "users" AS "u"'

    def test_alias(self) -> None:
        query = Select("projects", "p")
        assert query.resolved_table_name == "p"
        assert query.get_sql() == "SELECT `p`.* FROM `projects` AS `p`"

    def test_table_object(self, users_table: Table) -> None:
        assert Select(users_table).get_sql() == "SELECT `users`.* FROM `users`"

    def test_no_table(self) -> None:
        with pytest.raises(QueryCompositionError, match="No table given"):
            Select("")

    def test_custom_fields(self) -> None:
        assert Select("users").select("id, name").get_sql() == "SELECT id, name FROM `users`"

    def test_where_with_values(self) -> None:
        query = Select("projects", "p").where("p.owner_id = ?", 1).order_by("id ASC")
        assert query.render("mysql") == (
            "SELECT `p`.* FROM `projects` AS `p` WHERE (p.owner_id = :w0) ORDER BY id ASC",
            {"w0": 1},
        )

    def test_where_calls_are_anded(self) -> None:
        query = Select("users").where("a = ?", 1).where(Equals("b", 2))
        assert query.render() == (
            "SELECT `users`.* FROM `users` WHERE (a = :w0) AND `b` = :w1",
            {"w0": 1, "w1": 2},
        )

    def test_where_mapping(self) -> None:
        query = Select("users").where({"a = ?": 1, "b IN (?)": [2, 3]})
        assert query.render() == (
            "SELECT `users`.* FROM `users` WHERE ((a = :w0) AND (b IN (:w1, :w2)))",
            {"w0": 1, "w1": 2, "w2": 3},
        )

    def test_where_list(self) -> None:
        query = Select("users").where(["deleted_at IS NULL", Equals("role", "admin")])
        assert query.get_sql() == (
            "SELECT `users`.* FROM `users` WHERE ((deleted_at IS NULL) AND `role` = :w0)"
        )

    def test_where_or(self) -> None:
        query = Select("users").where_or(["a = 1", Raw("b = ?", 2)])
        assert query.get_sql() == "SELECT `users`.* FROM `users` WHERE ((a = 1) OR (b = :w0))"

    @pytest.mark.parametrize(
        "condition,values",
        [
            (Equals("a", 1), (1,)),
            ({"a = ?": 1}, (1,)),
            (42, ()),
            ([42], ()),
        ],
    )
    def test_invalid_conditions(self, condition: object, values: tuple) -> None:
        with pytest.raises(QueryCompositionError):
            Select("users").where(condition, *values)

    def test_joins(self) -> None:
        query = (
            Select("projects", "p")
            .left_join("users", "u", Relation("p.owner_id", "u.id"))
            .inner_join("teams", "t", ["t.id = p.team_id", Raw("t.active = ?", 1)])
            .where("u.role = ?", "admin")
        )
        assert query.render() == (
            "SELECT `p`.* FROM `projects` AS `p`"
            " LEFT JOIN `users` AS `u` ON `p`.`owner_id` = `u`.`id`"
            " INNER JOIN `teams` AS `t` ON ((t.id = p.team_id) AND (t.active = :j1j0))"
            " WHERE (u.role = :w0)",
            {"j1j0": 1, "w0": "admin"},
        )

    def test_group_by_having(self) -> None:
        query = (
            Select("projects")
            .select("owner_id, COUNT(*) AS n")
            .group_by("owner_id")
            .having("COUNT(*) > ?", 2)
        )
        assert query.render() == (
            "SELECT owner_id, COUNT(*) AS n FROM `projects` GROUP BY owner_id HAVING (COUNT(*) > :h0)",
            {"h0": 2},
        )

    def test_order_by_forms(self) -> None:
        query = Select("users").order_by("name DESC, id asc").order_by("rand()")
        assert query.get_sql() == "SELECT `users`.* FROM `users` ORDER BY name DESC, id ASC, RAND()"
        assert query.get_sql("sqlite").endswith("ORDER BY name DESC, id ASC, RANDOM()")

    def test_order_by_verbatim(self) -> None:
        assert Select("users").order_by("LENGTH(name)").get_sql().endswith("ORDER BY LENGTH(name)")

    def test_order_by_rejects_other_types(self) -> None:
        with pytest.raises(QueryCompositionError):
            Select("users").order_by(3)

    def test_limit_offset(self) -> None:
        assert Select("users").limit(10).get_sql() == "SELECT `users`.* FROM `users` LIMIT 10"
        assert Select("users").limit(10, 20).get_sql().endswith("LIMIT 10 OFFSET 20")

    @pytest.mark.parametrize("limit,offset", [("10", None), (True, None), (10, 1.5)])
    def test_limit_validated(self, limit: object, offset: object) -> None:
        with pytest.raises(QueryCompositionError, match="should be an integer"):
            Select("users").limit(limit, offset)

    def test_virtual_fields(self) -> None:
        count = Select("projects", "p2").select("COUNT(*)").where("p2.owner_id = ?", 5)
        query = Select("users", "u", virtual_fields={"upper_name": "UPPER(u.name)"})
        query.add_virtual_field("project_count", count).where("u.id = ?", 5)
        assert query.render() == (
            "SELECT `u`.*, UPPER(u.name) AS `upper_name`,"
            " (SELECT COUNT(*) FROM `projects` AS `p2` WHERE (p2.owner_id = :s0w0)) AS `project_count`"
            " FROM `users` AS `u` WHERE (u.id = :w0)",
            {"s0w0": 5, "w0": 5},
        )

    def test_full_clause_order(self) -> None:
        query = (
            Select("projects", "p")
            .left_join("users", "u", "u.id = p.owner_id")
            .where("p.name LIKE ?", "a%")
            .group_by("p.owner_id")
            .having("COUNT(*) > ?", 1)
            .order_by("p.owner_id DESC")
            .limit(5, 10)
        )
        assert query.get_sql() == (
            "SELECT `p`.* FROM `projects` AS `p`"
            " LEFT JOIN `users` AS `u` ON (u.id = p.owner_id)"
            " WHERE (p.name LIKE :w0)"
            " GROUP BY p.owner_id"
            " HAVING (COUNT(*) > :h0)"
            " ORDER BY p.owner_id DESC"
            " LIMIT 5 OFFSET 10"
        )

    def test_render_is_repeatable(self) -> None:
        query = Select("users").where("id IN (?)", [1, 2]).order_by("id ASC")
        assert query.render("mysql") == query.render("mysql")

    def test_placeholders_unique_when_nested(self) -> None:
        inner = Select("users").select("id").where("role = ?", "admin")
        query = (
            Select("projects", "p")
            .left_join("teams", "t", Raw("t.id = p.team_id AND t.size > ?", 3))
            .where("p.owner_id IN (?)", inner)
            .where(Equals("p.id", Select("pins").select("project_id").where("user = ?", 9)))
            .having("COUNT(*) > ?", 1)
        )
        sql, values = query.render()
        placeholders = re.findall(r":(\w+)", sql)
        assert len(placeholders) == len(set(placeholders))
        assert set(placeholders) == set(values)
        assert values == {"j0j0": 3, "z0w0": "admin", "z1w0": 9, "h0": 1}

    def test_raw_subquery_placeholders_namespaced(self) -> None:
        pins = RawQuery("SELECT id FROM pins WHERE user_id = :w0", {"w0": 1})
        query = Select("projects").where("status = ?", "open").where(In("id", pins))
        assert query.render() == (
            "SELECT `projects`.* FROM `projects` WHERE (status = :w0)"
            " AND `id` IN (SELECT id FROM pins WHERE user_id = :z0w0)",
            {"w0": "open", "z0w0": 1},
        )
        assert pins.render() == ("SELECT id FROM pins WHERE user_id = :w0", {"w0": 1})

    def test_raw_subquery_leaves_unbound_names(self) -> None:
        lookup = RawQuery("SELECT x FROM y WHERE z = :day AND k = :k", {"k": 2})
        query = Select("t").where("a IN (?)", lookup)
        assert query.render() == (
            "SELECT `t`.* FROM `t` WHERE (a IN (SELECT x FROM y WHERE z = :day AND k = :z0k))",
            {"z0k": 2},
        )


# =========================================================================
# UNION
# =========================================================================


class TestUnion:
    def test_members_namespaced(self) -> None:
        union = Union(
            Select("users").select("id").where("role = ?", "admin"),
            Select("users").select("id").where("role = ?", "owner"),
        )
        assert union.render() == (
            "SELECT id FROM `users` WHERE (role = :u0w0)"
            " UNION SELECT id FROM `users` WHERE (role = :u1w0)",
            {"u0w0": "admin", "u1w0": "owner"},
        )

    def test_placeholders_unique_in_nested_unions(self) -> None:
        admins = Select("users").select("id").where("role = ?", "admin")
        inner = Union(
            Select("users").select("id").where("role = ?", "owner"),
            Select("users").select("id").where(In("id", admins)).where("team = ?", 4),
        )
        outer = Union(Select("users").select("id").where("role = ?", "guest"), inner)

        sql, values = outer.render()
        placeholders = re.findall(r":(\w+)", sql)
        assert len(placeholders) == len(set(placeholders))
        assert set(placeholders) == set(values)
        assert values == {
            "u0w0": "guest",
            "u1u0w0": "owner",
            "u1u1z0w0": "admin",
            "u1u1w0": 4,
        }

    def test_order_and_limit_wrap(self) -> None:
        union = Union(Select("a").select("id"), Select("b").select("id"))
        union.add_query(Select("c").select("id"))
        union.order_by("id DESC").limit(10)
        assert union.get_sql() == (
            "(SELECT id FROM `a` UNION SELECT id FROM `b` UNION SELECT id FROM `c`)"
            " ORDER BY id DESC LIMIT 10"
        )
        assert len(union.queries) == 3

    def test_page_cursor_applies(self) -> None:
        union = Union(Select("a").select("id"), Select("b").select("id"))
        union.apply_cursor(PageCursor(2, page_size=10))
        assert union.get_sql().endswith(") LIMIT 10 OFFSET 10")

    @pytest.mark.parametrize(
        "method,args",
        [
            ("select", ("id",)),
            ("add_virtual_field", ("x", "1")),
            ("where", ("a = 1",)),
            ("where_or", (["a = 1"],)),
            ("having", ("a = 1",)),
            ("group_by", ("a",)),
            ("left_join", ("t", "t", "1 = 1")),
            ("inner_join", ("t", "t", "1 = 1")),
            ("set_cursor_condition", (Equals("id", 1),)),
        ],
    )
    def test_misuse(self, method: str, args: tuple) -> None:
        union = Union(Select("a"), Select("b"))
        with pytest.raises(UnionMisuseError):
            getattr(union, method)(*args)

    def test_misuse_is_not_supported(self) -> None:
        with pytest.raises(NotSupportedError):
            Union(Select("a")).where("a = 1")


# =========================================================================
# Runnable SQL
# =========================================================================


class TestRunnableSql:
    def test_mysql_literals(self) -> None:
        query = (
            Select("users", "u").where("u.name = ?", "Dave").where(In("u.id", list(range(11))))
        )
        assert query.to_runnable_sql("mysql") == (
            'SELECT `u`.* FROM `users` AS `u` WHERE (u.name = "Dave")'
            " AND `u`.`id` IN (0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10)"
        )

    def test_sqlite_literals(self) -> None:
        query = Select("users").where("name = ? AND active = ?", "O'Brien", True)
        assert query.to_runnable_sql("sqlite") == (
            """SELECT "users".* FROM "users" WHERE (name = 'O''Brien' AND active = 1)"""
        )

    def test_nested_values_inlined(self) -> None:
        inner = Select("pins").select("project_id").where("user_id = ?", 9)
        query = Select("projects").where("owner = ?", 1).where(In("id", inner))
        assert query.to_runnable_sql("sqlite") == (
            'SELECT "projects".* FROM "projects" WHERE (owner = 1)'
            ' AND "id" IN (SELECT project_id FROM "pins" WHERE (user_id = 9))'
        )

    def test_null_value(self) -> None:
        query = Insert("users").values({"name": "Dave", "role": None})
        assert query.to_runnable_sql("mysql") == (
            'INSERT INTO `users` (`name`, `role`) VALUES ("Dave", NULL)'
        )

    def test_nothing_to_render(self) -> None:
        assert Update("users").to_runnable_sql() is None

    def test_render_unchanged(self) -> None:
        query = Select("users").where("id = ?", 3)
        query.to_runnable_sql()
        assert query.render() == ("SELECT `users`.* FROM `users` WHERE (id = :w0)", {"w0": 3})
