"""Tests for building entity descriptors from Python classes."""

from dataclasses import dataclass, field

from seed_codegen import FieldKind, describe, introspection, key_field
from seed_codegen.introspection import clear_cache, describe_class, is_collection, is_entity, is_value_shaped
from seed_codegen.types import ArrayTypeDefinition, EntityTypeDefinition, ValueTypeDefinition
from seed_domain import (
    Account,
    Customer,
    Node,
    Order,
    SubItem4,
    TypeWithDiscardAttribute,
    UnknownStruct,
)


class TestDescribe:
    """Tests for describe()."""

    def test_fields_in_declaration_order(self):
        """Test that dataclass fields keep their order."""
        type_def = describe(SubItem4)
        assert [f.name for f in type_def.fields] == ["Id", "SubItem4Type", "SubItem3", "Name"]

    def test_field_kinds(self):
        """Test that fields are classified as values, references or collections."""
        type_def = describe(Customer)
        kinds = {f.name: f.kind for f in type_def.fields}
        assert kinds == {
            "Id": FieldKind.VALUE,
            "Name": FieldKind.VALUE,
            "Orders": FieldKind.COLLECTION,
            "Password": FieldKind.VALUE,
        }
        assert isinstance(type_def.get_field("Orders").type_def, ArrayTypeDefinition)

    def test_optional_reference(self):
        """Test that an Optional entity annotation is a reference."""
        order = describe(Order)
        customer_field = order.get_field("Customer")
        assert customer_field.kind is FieldKind.REFERENCE
        assert customer_field.type_def is describe(Customer)

    def test_tuple_and_any(self):
        """Test that tuples are collections and Any is dynamic."""
        order = describe(Order)
        assert order.get_field("Lines").kind is FieldKind.COLLECTION
        assert order.get_field("Extra").kind is FieldKind.VALUE

    def test_self_reference(self):
        """Test that a class referencing itself resolves to the same descriptor."""
        type_def = describe(Node)
        assert type_def.get_field("Parent").type_def is type_def

    def test_instance_and_class_agree(self):
        """Test that describing an instance returns the class descriptor."""
        assert describe(Node(Id=1)) is describe(Node)

    def test_frozen_dataclass_is_value(self):
        """Test that a frozen dataclass field is a value, not a reference."""
        @dataclass
        class Holder:
            Id: int = key_field(default=0)
            Point: UnknownStruct = field(default_factory=UnknownStruct)

        type_def = describe(Holder)
        point = type_def.get_field("Point")
        assert point.kind is FieldKind.VALUE
        assert isinstance(point.type_def, ValueTypeDefinition)

    def test_cached(self):
        """Test that a class is described once."""
        assert describe_class(Customer) is describe_class(Customer)
        assert isinstance(describe_class(Customer), EntityTypeDefinition)
        assert describe_class(Customer).python_type is Customer

    def test_clear_cache(self, monkeypatch):
        """Test that clearing the cache builds a fresh, equal descriptor."""
        monkeypatch.setattr(introspection, "_DESCRIPTORS", {})

        @dataclass
        class Temp:
            Id: int = key_field(default=0)

        before = describe(Temp)
        clear_cache()
        after = describe(Temp)
        assert after is not before
        assert [f.name for f in after.fields] == ["Id"]


class TestMarkers:
    """Tests for key and discard markers."""

    def test_key_field(self):
        """Test key_field metadata."""
        type_def = describe(Customer)
        assert type_def.key_field.name == "Id"

    def test_discard_field(self):
        """Test discard_field metadata."""
        type_def = describe(TypeWithDiscardAttribute)
        assert type_def.get_field("DiscardValue").discard

    def test_annotated_markers(self):
        """Test Key and Discard inside Annotated on a plain class."""
        type_def = describe(Account)
        assert type_def.key_field.name == "Code"
        assert type_def.get_field("Token").discard

    def test_first_key_wins(self):
        """Test that the first key-marked field is the key."""
        @dataclass
        class TwoKeys:
            First: int = key_field(default=0)
            Second: int = key_field(default=0)

        assert describe(TwoKeys).key_field.name == "First"


class TestEmittedFields:
    """Tests for the fields that take part in generated code."""

    def test_skips_discard_and_collections(self):
        """Test that discarded and collection fields are dropped."""
        names = [f.name for f in describe(Customer).emitted_fields()]
        assert names == ["Id", "Name"]

    def test_skips_id_suffix_except_key(self):
        """Test that foreign-key style fields are dropped but the key is kept."""
        names = [f.name for f in describe(Order).emitted_fields()]
        assert names == ["Id", "Customer", "Extra"]

    def test_empty_suffix_keeps_everything(self):
        """Test that an empty suffix disables the rule."""
        names = [f.name for f in describe(Order).emitted_fields(id_suffix="")]
        assert names == ["Id", "Customer", "CustomerId", "Extra"]

    def test_plain_class(self):
        """Test that private attributes and properties are not emitted."""
        type_def = describe(Account)
        assert [f.name for f in type_def.fields] == ["Code", "Owner", "Balance", "Token", "_cache"]
        assert not type_def.get_field("_cache").writable
        assert type_def.get_field("Display") is None
        assert [f.name for f in type_def.emitted_fields()] == ["Code", "Owner", "Balance"]

    def test_init_false_is_read_only(self):
        """Test that dataclass fields excluded from __init__ are not emitted."""
        @dataclass
        class Computed:
            Id: int = key_field(default=0)
            Total: int = field(default=0, init=False)

        type_def = describe(Computed)
        assert not type_def.get_field("Total").writable
        assert [f.name for f in type_def.emitted_fields()] == ["Id"]


class TestShapes:
    """Tests for value/entity classification of runtime values."""

    def test_values(self):
        """Test values that are never entities."""
        for value in [None, 1, "a", 1.5, b"x", (1, 2), [1], {"a": 1}, {1}, UnknownStruct()]:
            assert is_value_shaped(value)
            assert not is_entity(value)

    def test_entities(self):
        """Test that ordinary objects are entities."""
        assert is_entity(Customer(Id=1))
        assert is_entity(Account("A"))

    def test_collections(self):
        """Test which runtime values count as collections."""
        for value in [[1], (1, 2), {"a": 1}, {1}, frozenset()]:
            assert is_collection(value)
        for value in [None, "abc", b"x", 1, UnknownStruct(), Customer(Id=1)]:
            assert not is_collection(value)
