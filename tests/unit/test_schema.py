"""Tests for flattened schema computation and the schema cache."""

import threading

import pytest

from fixtures.records import Account, Audit, Event, Invoice, MemberModel, Node, Owner, Row
from tagfields import IntrospectionConfig, Introspector, SchemaCache, compute_schema


class TestComputeSchema:
    """Test type-level flattening of record fields."""

    def test_composed_fields_are_inlined_in_declaration_order(self, introspector):
        schema = introspector.compute_schema(Account)

        assert [p.field_name for p in schema] == [
            "UserID",
            "display_name",
            "password",
            "dash",
            "created_by",
            "updated_at",
            "OwnerID",
            "owner_name",
            "balance",
        ]

    def test_marshal_names(self, introspector):
        schema = introspector.compute_schema(Account)

        assert [p.marshal_name for p in schema] == [
            "user_id",
            "nick",
            "password",
            "-",
            "created_by",
            "updated_at",
            "owner_id",
            "owner_name",
            "balance",
        ]

    def test_dash_tags(self, introspector):
        schema = introspector.compute_schema(Account)

        assert schema[2].ignored
        assert not schema[3].ignored
        assert schema[3].force_string

    def test_idempotent(self, introspector):
        first = introspector.compute_schema(Account)
        second = introspector.compute_schema(Account)

        assert first == second
        assert first is second

    def test_recomputed_schema_is_equal(self):
        assert Introspector().compute_schema(Account) == Introspector().compute_schema(Account)

    def test_does_not_touch_instances(self, introspector):
        """Optional composed records are expanded from their type alone."""
        account = Account()
        introspector.compute_schema(type(account))

        assert account.owner is None

    def test_opaque_embeds_are_single_fields(self, introspector):
        schema = introspector.compute_schema(Event)
        assert [p.marshal_name for p in schema] == ["title", "at", "handler"]

    def test_configured_opaque_type(self):
        introspector = Introspector(IntrospectionConfig(opaque_types=["fixtures.records:Money"]))
        from fixtures.records import Invoice

        assert [p.field_name for p in introspector.compute_schema(Invoice)] == ["number", "total"]

    def test_pydantic_model(self, introspector):
        schema = introspector.compute_schema(MemberModel)

        assert [p.marshal_name for p in schema] == ["member_id", "about", "website", "joined"]
        assert schema[1].omit_false

    def test_custom_tag_keys(self):
        from dataclasses import dataclass, field

        @dataclass
        class Row:
            col: int = field(default=0, metadata={"tag": 'db:"column_a,string" json:"ignored"'})

        introspector = Introspector(IntrospectionConfig(primary_tag_key="db"))
        schema = introspector.compute_schema(Row)

        assert schema[0].marshal_name == "column_a"
        assert schema[0].force_string

    def test_self_composition_raises(self, introspector):
        with pytest.raises(TypeError, match="composes itself"):
            introspector.compute_schema(Node)

    def test_non_record_raises(self, introspector):
        with pytest.raises(TypeError):
            introspector.compute_schema(int)

    def test_module_level_function_uses_default_cache(self):
        assert compute_schema(Account) is compute_schema(Account)


class TestTypeSchema:
    def test_offsets_and_widths(self, introspector):
        ts = introspector.type_schema(Account)

        assert ts.offsets == (0, 1, 2, 3, 4, 6, 8)
        assert ts.widths == (1, 1, 1, 1, 2, 2, 1)
        assert len(ts) == 9


class TestSchemaCache:
    """Test per-type memoization."""

    def test_composed_types_are_cached_too(self, introspector):
        introspector.compute_schema(Account)

        assert Account in introspector.cache
        assert Audit in introspector.cache
        assert Owner in introspector.cache
        assert len(introspector.cache) == 3

    def test_load_or_store_keeps_first_value(self, introspector):
        cache = SchemaCache()
        first = introspector.type_schema(Audit)
        second = Introspector().type_schema(Audit)

        assert cache.load_or_store(Audit, first) is first
        assert cache.load_or_store(Audit, second) is first

    def test_clear(self, introspector):
        introspector.compute_schema(Account)
        introspector.cache.clear()

        assert len(introspector.cache) == 0

    def test_shared_cache_between_introspectors(self):
        cache = SchemaCache()
        first = Introspector(cache=cache).compute_schema(Account)

        assert Introspector(cache=cache).compute_schema(Account) is first

    def test_shared_cache_keeps_schemas_per_tag_key(self):
        cache = SchemaCache()
        by_json = Introspector(cache=cache).compute_schema(Row)
        by_db = Introspector(IntrospectionConfig(primary_tag_key="db"), cache=cache).compute_schema(Row)

        assert by_json[0].marshal_name == "json_name"
        assert by_db[0].marshal_name == "column_a"
        assert len(cache) == 2
        assert Row in cache

    def test_shared_cache_keeps_schemas_per_opaque_types(self):
        cache = SchemaCache()
        Introspector(cache=cache).compute_schema(Invoice)
        config = IntrospectionConfig(opaque_types=["fixtures.records:Money"])

        schema = Introspector(config, cache=cache).compute_schema(Invoice)

        assert [p.field_name for p in schema] == ["number", "total"]

    def test_concurrent_first_use_converges(self):
        cache = SchemaCache()
        barrier = threading.Barrier(8)
        results = []

        def worker():
            introspector = Introspector(cache=cache)
            barrier.wait()
            results.append(introspector.compute_schema(Account))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 8
        assert all(r is cache.get(Account).fields for r in results)
