"""
Tests for predicate handling, statement building and id selection.
"""

import itertools

import pytest
from pydantic import ValidationError
from sqlalchemy.dialects import sqlite

from persistbase.core.entity import Entity
from persistbase.core.query import Predicate, QueryBuilder, normalize_predicates
from persistbase.errors import PersistenceUnavailableError, SerializationError
from persistbase.persistence.schema import properties_table, records_table
from persistbase.persistence.table_hash import freeze


class Package(Entity):
    pass


class Untouched(Entity):
    pass


def compile_sqlite(builder: QueryBuilder):
    return builder.build().compile(dialect=sqlite.dialect())


@pytest.fixture
def builder():
    return QueryBuilder(records_table("query_test_recs"), properties_table("query_test_props"))


def store(context, cls, **params):
    obj = context.factory.construct_uninitialized(cls)
    for key, value in params.items():
        obj.set_param(key, value)
    return obj.record_id


class TestPredicates:

    def test_mapping(self):
        assert normalize_predicates({"a": 1}) == [Predicate(key="a", value=1)]

    def test_pairs_predicates_and_keywords(self):
        predicates = normalize_predicates([("a", 1), Predicate(key="b", value=2)], c=3)
        assert [(p.key, p.value) for p in predicates] == [("a", 1), ("b", 2), ("c", 3)]

    def test_empty(self):
        assert normalize_predicates() == []
        assert normalize_predicates({}) == []

    def test_predicates_are_frozen(self):
        predicate = Predicate(key="a", value=1)
        with pytest.raises(ValidationError):
            predicate.key = "b"


class TestQueryBuilder:

    def test_empty_builder_selects_all_records(self, builder):
        compiled = compile_sqlite(builder)
        assert str(compiled).split() == ["SELECT", "query_test_recs.id", "FROM", "query_test_recs"]
        assert builder.binds == []

    def test_single_predicate(self, builder):
        compiled = compile_sqlite(builder.where("name", "foo"))
        sql = str(compiled)
        assert "FROM query_test_props AS t1" in sql
        assert "JOIN" not in sql
        assert compiled.positiontup == ["key_1", "value_1"]

    @pytest.mark.parametrize("count", [1, 2, 3, 5])
    def test_two_bindings_per_predicate_in_placeholder_order(self, builder, count):
        pairs = [(f"key{i}", f"value{i}") for i in range(count)]
        for key, value in pairs:
            builder.where(key, value)

        compiled = compile_sqlite(builder)
        expected = [item for key, value in pairs for item in (key, freeze(value))]

        assert len(builder) == count
        assert str(compiled).count("?") == 2 * count
        assert len(compiled.positiontup) == 2 * count
        assert [compiled.params[name] for name in compiled.positiontup] == expected
        assert [value for _, value in builder.binds] == expected
        assert [name for name, _ in builder.binds] == compiled.positiontup

    def test_aliases_join_on_first(self, builder):
        builder.where("a", 1).where("b", 2).where("c", 3)
        sql = " ".join(str(compile_sqlite(builder)).split())
        assert "SELECT t1.id FROM query_test_props AS t1" in sql
        assert "JOIN query_test_props AS t2 ON t1.id = t2.id" in sql
        assert "JOIN query_test_props AS t3 ON t1.id = t3.id" in sql

    def test_values_are_never_inlined(self, builder):
        builder.where("name", "x'; DROP TABLE query_test_recs; --")
        sql = str(compile_sqlite(builder))
        assert "DROP TABLE" not in sql
        assert "name" not in sql.replace("query_test", "")

    def test_unserializable_value_raises(self, builder):
        with pytest.raises(SerializationError):
            builder.where("name", object())

    def test_unencodable_key_raises(self, builder):
        with pytest.raises(SerializationError):
            builder.where("bad\ud800", "foo")
        assert builder.binds == []


class TestSelectIds:

    def test_disabled_persistence_returns_none(self, memory_context):
        assert memory_context.selector.select_ids(Package) is None
        assert memory_context.selector.select_ids(Package, {"name": "foo"}) is None

    def test_disabled_persistence_ignores_bad_values(self, memory_context):
        assert memory_context.selector.select_ids(Package, {"name": object()}) is None

    def test_required_persistence_raises(self, memory_context):
        with pytest.raises(PersistenceUnavailableError):
            memory_context.selector.select_ids(Package, require=True)

    def test_missing_tables_give_empty_results(self, context):
        assert context.selector.select_ids(Untouched) == []
        assert context.selector.select_ids(Untouched, name="foo") == []

    def test_empty_predicates_return_every_record(self, context):
        ids = {store(context, Package, name="foo"), store(context, Package), store(context, Package, name="bar")}
        assert set(context.selector.select_ids(Package)) == ids

    def test_records_without_properties_exist_only_in_records_table(self, context):
        record_id = store(context, Package)
        assert context.selector.select_ids(Package) == [record_id]
        assert context.selector.select_ids(Package, name="foo") == []

    def test_conjunction(self, context):
        r1 = store(context, Package, a=1, b=2)
        r2 = store(context, Package, a=1, b=3)

        assert context.selector.select_ids(Package, a=1, b=2) == [r1]
        assert sorted(context.selector.select_ids(Package, a=1)) == sorted([r1, r2])
        assert context.selector.select_ids(Package, a=1, b=4) == []

    def test_extra_properties_do_not_disqualify(self, context):
        record_id = store(context, Package, name="foo", version="1.0", maintainer="someone")
        assert context.selector.select_ids(Package, name="foo") == [record_id]

    def test_values_compare_by_type(self, context):
        record_id = store(context, Package, count=1)
        assert context.selector.select_ids(Package, count=1) == [record_id]
        assert context.selector.select_ids(Package, count="1") == []

    def test_key_and_value_are_matched_together(self, context):
        store(context, Package, a="b", c="d")
        assert context.selector.select_ids(Package, a="d") == []
        assert context.selector.select_ids(Package, c="b") == []

    def test_classes_are_isolated(self, context):
        store(context, Package, name="foo")
        other = store(context, Untouched, name="foo")
        assert context.selector.select_ids(Untouched, name="foo") == [other]

    def test_serialization_failure_propagates(self, context):
        store(context, Package, name="foo")
        with pytest.raises(SerializationError):
            context.selector.select_ids(Package, name=object())

    def test_serialization_failure_propagates_without_tables(self, context):
        with pytest.raises(SerializationError):
            context.selector.select_ids(Untouched, name=object())

    def test_lone_surrogate_value_is_bound(self, context):
        match = store(context, Package, name="bad\ud800")
        store(context, Package, name="bad")
        assert context.selector.select_ids(Package, name="bad\ud800") == [match]

    def test_unencodable_key_raises(self, context):
        store(context, Package, name="foo")
        with pytest.raises(SerializationError):
            context.selector.select_ids(Package, {"bad\ud800": "foo"})

    def test_keyword_predicates_may_reuse_argument_names(self, context):
        match = store(context, Package, proto="a", predicates="b", require="c")
        store(context, Package, proto="a")
        found = context.selector.select_ids(Package, {"require": "c"}, proto="a", predicates="b")
        assert found == [match]

    def test_adding_predicates_only_narrows(self, context):
        data = [
            {"a": 1, "b": 2, "c": 3},
            {"a": 1, "b": 2},
            {"a": 1, "c": 3},
            {"b": 2, "c": 4},
            {"a": 2, "b": 2, "c": 3},
            {},
        ]
        for params in data:
            store(context, Package, **params)

        universe = [("a", 1), ("a", 2), ("b", 2), ("c", 3), ("c", 4)]
        results = {}
        for size in range(len(universe) + 1):
            for combo in itertools.combinations(universe, size):
                results[combo] = set(context.selector.select_ids(Package, list(combo)))

        for smaller, larger in itertools.product(results, repeat=2):
            if set(smaller) <= set(larger):
                assert results[larger] <= results[smaller], f"{larger} matched more than {smaller}"
