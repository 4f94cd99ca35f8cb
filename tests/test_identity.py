"""Tests for entity identity."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

import pytest

from seed_codegen import NoKeyError, UnencodableTypeError, identity_of
from seed_codegen.identity import type_name_of, variable_name
from seed_domain import Account, IntContainer, TopItem, TypeWithoutKey, UnknownStruct


class TestIdentityOf:
    """Tests for key lookup."""

    def test_dataclass_key(self):
        """Test reading a key declared with key_field."""
        assert identity_of(TopItem(Id=42)) == 42

    def test_annotated_key(self):
        """Test reading a key declared with Annotated."""
        assert identity_of(Account("A1")) == "A1"

    def test_no_key(self):
        """Test that a keyless entity raises NoKeyError."""
        with pytest.raises(NoKeyError) as exc_info:
            identity_of(TypeWithoutKey())
        assert exc_info.value.type_name == "TypeWithoutKey"
        assert isinstance(exc_info.value, LookupError)

    @pytest.mark.parametrize(
        "value",
        [1, "text", True, 1.5, Decimal("1"), datetime(2020, 1, 1), UUID(int=0), None, [1], (1,)],
    )
    def test_value_shaped_rejected(self, value):
        """Test that primitives and collections have no identity."""
        with pytest.raises(UnencodableTypeError):
            identity_of(value)

    def test_frozen_dataclass_rejected(self):
        """Test that a frozen dataclass is value-shaped."""
        with pytest.raises(UnencodableTypeError) as exc_info:
            identity_of(UnknownStruct())
        assert str(exc_info.value) == 'Unknown primitive or value type "UnknownStruct".'


class TestNaming:
    """Tests for type and variable names."""

    def test_type_name(self):
        """Test that the runtime class name is used."""
        assert type_name_of(IntContainer()) == "IntContainer"

    def test_variable_name(self):
        """Test lowercase type name joined to the key literal."""
        assert variable_name("SubItem4Type", "7") == "subitem4type_7"
