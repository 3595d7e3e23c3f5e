import pytest

from raml_parser.errors import InheritanceCycleError, TypeValidationError, UnresolvedTypeError
from raml_parser.typesystem.determine import determine_type
from raml_parser.typesystem.proxy import LazyProxyType
from raml_parser.typesystem.registry import TypeRegistry, merge_declarations
from raml_parser.typesystem.scalars import StringType
from raml_parser.typesystem.structured import ArrayType, ObjectType


def _registry(declarations: dict) -> TypeRegistry:
    registry = TypeRegistry()
    for name, definition in declarations.items():
        registry.add(determine_type(name, definition, registry))
    return registry


class TestRegistryBasics:
    def test_clear_then_apply_on_empty_registry(self):
        registry = TypeRegistry()
        registry.clear()
        registry.apply_inheritance()
        assert len(registry) == 0

    def test_clear_drops_previous_types(self):
        registry = _registry({"Id": "string"})
        registry.clear()
        assert "Id" not in registry

    def test_get_unknown_type(self):
        with pytest.raises(UnresolvedTypeError) as exc_info:
            TypeRegistry().get("Missing")
        assert exc_info.value.key == "Missing"

    def test_add_with_explicit_key(self):
        registry = TypeRegistry()
        registry.add(determine_type("Payload", '{"type": "object"}'), key="Payload")
        assert "Payload" in registry


class TestInheritance:
    def test_child_keeps_own_facets_and_inherits_others(self):
        registry = _registry({
            "A": {"type": "string", "pattern": "^[a-z]+$", "maxLength": 10},
            "B": {"type": "A", "maxLength": 3},
        })
        registry.apply_inheritance()

        b = registry.get("B")
        assert isinstance(b, StringType)
        assert b.max_length == 3
        assert b.pattern == "^[a-z]+$"
        assert b.parent == "A"
        assert b.name == "B"

    def test_forward_reference(self):
        registry = _registry({
            "Child": {"type": "Base", "properties": {"extra": "integer"}},
            "Base": {"properties": {"id": "string"}},
        })
        registry.apply_inheritance()

        child = registry.get("Child")
        assert isinstance(child, ObjectType)
        assert set(child.properties) == {"id", "extra"}

    def test_multi_level_inheritance(self):
        registry = _registry({
            "C": {"type": "B", "minLength": 1},
            "B": {"type": "A", "maxLength": 5},
            "A": "string",
        })
        registry.apply_inheritance()

        c = registry.get("C")
        assert isinstance(c, StringType)
        assert (c.min_length, c.max_length) == (1, 5)

    def test_missing_parent(self):
        registry = _registry({"B": {"type": "Nowhere"}})
        with pytest.raises(UnresolvedTypeError) as exc_info:
            registry.apply_inheritance()
        assert exc_info.value.key == "Nowhere"
        assert exc_info.value.referenced_by == "B"

    def test_cycle_is_rejected(self):
        registry = _registry({"A": {"type": "B"}, "B": {"type": "A"}})
        with pytest.raises(InheritanceCycleError):
            registry.apply_inheritance()

    def test_self_reference_is_rejected(self):
        registry = _registry({"A": {"type": "A"}})
        with pytest.raises(InheritanceCycleError):
            registry.apply_inheritance()

    def test_unresolved_nested_reference(self):
        registry = _registry({"Song": {"properties": {"artist": "Artist"}}})
        with pytest.raises(UnresolvedTypeError) as exc_info:
            registry.apply_inheritance()
        assert exc_info.value.key == "Artist"


class TestProxyIndirection:
    def test_nested_proxy_sees_resolved_entry(self):
        registry = _registry({
            "Songs": "Song[]",
            "Song": {"type": "Base", "properties": {"title": "string"}},
            "Base": {"properties": {"id": "integer"}},
        })
        songs = registry.get("Songs")
        registry.apply_inheritance()

        assert isinstance(songs, ArrayType)
        item = songs.items
        assert isinstance(item, LazyProxyType)
        assert item.resolve() is registry.get("Song")
        assert set(item.resolve().properties) == {"id", "title"}

    def test_validation_through_proxy(self):
        registry = _registry({
            "Song": {"properties": {"title": "string", "artist": "Artist"}},
            "Artist": {"properties": {"name": {"type": "string", "minLength": 2}}},
        })
        registry.apply_inheritance()
        song = registry.get("Song")

        song.validate_value({"title": "Blue", "artist": {"name": "Jo"}})
        with pytest.raises(TypeValidationError) as exc_info:
            song.validate_value({"title": "Blue", "artist": {"name": "J"}})
        assert exc_info.value.property_name == "name"

    def test_facets_beside_reference_constrain_values(self):
        registry = _registry({
            "Title": "string",
            "Song": {"properties": {"title": {"type": "Title", "maxLength": 3}}},
        })
        registry.apply_inheritance()
        song = registry.get("Song")

        song.validate_value({"title": "abc"})
        with pytest.raises(TypeValidationError) as exc_info:
            song.validate_value({"title": "abcdefgh"})
        assert exc_info.value.property_name == "title"
        assert registry.get("Title").max_length is None

    def test_unbound_proxy_cannot_resolve(self):
        proxy = determine_type("owner", "Person")
        with pytest.raises(UnresolvedTypeError):
            proxy.resolve()


class TestMergeDeclarations:
    def test_properties_merged_per_key(self):
        merged = merge_declarations(
            {"type": "object", "properties": {"a": "string", "b": "string"}},
            {"type": "Parent", "properties": {"b": "integer"}},
        )
        assert merged == {"type": "object", "properties": {"a": "string", "b": "integer"}}
