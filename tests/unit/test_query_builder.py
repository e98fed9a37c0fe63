"""Tests for the parameterized SQL builders."""

import pytest

from schoolshelf.db.query_builder import QueryBuilder, SetClause


class TestQueryBuilder:
    """Tests for QueryBuilder."""

    def test_empty_builder_has_no_clause(self):
        qb = QueryBuilder()
        assert qb.clause == ""
        assert qb.params == {}

    def test_placeholders_follow_insertion_order(self):
        qb = QueryBuilder().where("a = {0}", 1).where("b BETWEEN {0} AND {1}", 2, 3)
        assert qb.clause == " WHERE a = :p0 AND b BETWEEN :p1 AND :p2"
        assert qb.params == {"p0": 1, "p1": 2, "p2": 3}

    def test_slot_can_repeat(self):
        qb = QueryBuilder().where("(x LIKE {0} OR y LIKE {0})", "%q%")
        assert qb.clause == " WHERE (x LIKE :p0 OR y LIKE :p0)"
        assert qb.params == {"p0": "%q%"}

    def test_where_if_skips_false_conditions(self):
        qb = QueryBuilder().where_if(False, "a = {0}", 1).where_if(True, "b = {0}", 2)
        assert qb.clause == " WHERE b = :p0"
        assert qb.params == {"p0": 2}

    def test_paginate_appends_without_mutating(self):
        qb = QueryBuilder().where("a = {0}", "x")
        suffix, params = qb.paginate(10, 20)

        assert suffix == " LIMIT :p1 OFFSET :p2"
        assert params == {"p0": "x", "p1": 10, "p2": 20}
        assert qb.params == {"p0": "x"}

    def test_values_never_reach_sql_text(self):
        hostile = "'; DROP TABLE users; --"
        qb = QueryBuilder().where("name = {0}", hostile)
        assert hostile not in qb.clause


class TestSetClause:
    """Tests for SetClause."""

    def test_builds_assignments(self):
        clause = SetClause({"title", "author"}).set("title", "T").set("author", "A")
        assert clause.sql == "title = :s0, author = :s1"
        assert clause.params == {"s0": "T", "s1": "A"}
        assert clause

    def test_empty_is_falsy(self):
        assert not SetClause({"title"})

    def test_rejects_unknown_column(self):
        with pytest.raises(ValueError):
            SetClause({"title"}).set("id", "x")
