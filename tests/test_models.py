"""Tests for ScaffoldKit data models."""

import pytest
from pydantic import ValidationError

from scaffoldkit.models import (
    ChangeAction,
    EntitySpec,
    FieldSpec,
    Fragment,
    InsertionPolicy,
    ScaffoldConfig,
    ScaffoldRequest,
    ScaffoldResponse,
    ScaffoldResult,
)


class TestFieldSpec:
    """Test FieldSpec validation."""

    def test_valid_field(self) -> None:
        """Test creating a valid field."""
        field = FieldSpec(name="unit_price", type="DECIMAL")
        assert field.identifier == "UnitPrice"

    def test_default_type(self) -> None:
        """Test that the type defaults to string."""
        assert FieldSpec(name="title").type == "string"

    def test_invalid_name(self) -> None:
        """Test that unusable names are rejected."""
        with pytest.raises(ValidationError, match="Field name must be a snake_case identifier"):
            FieldSpec(name="unit-price", type="INT")


class TestEntitySpec:
    """Test EntitySpec validation."""

    def test_valid_entity(self) -> None:
        """Test creating a valid entity with a reference."""
        entity = EntitySpec(
            table_name="order_item",
            reference_table="order",
            fields=[{"name": "quantity", "type": "INT"}],
        )
        assert entity.identifier == "OrderItem"
        assert entity.reference_identifier == "Order"

    def test_empty_reference_means_none(self) -> None:
        """Test that an empty reference table is dropped."""
        entity = EntitySpec(table_name="order", reference_table="  ")
        assert entity.reference_table is None
        assert entity.reference_identifier is None

    def test_invalid_table_name(self) -> None:
        """Test that an empty table name is rejected."""
        with pytest.raises(ValidationError, match="Table name must be a snake_case identifier"):
            EntitySpec(table_name="")

    def test_duplicate_fields(self) -> None:
        """Test that field names must be unique."""
        with pytest.raises(ValidationError, match="Duplicate field name"):
            EntitySpec(
                table_name="order",
                fields=[
                    {"name": "total", "type": "INT"},
                    {"name": "total", "type": "DECIMAL"},
                ],
            )

    @pytest.mark.parametrize("name", ["order", "order_i_d"])
    def test_field_colliding_with_reference(self, name: str) -> None:
        """Test that fields cannot shadow the generated reference fields."""
        with pytest.raises(ValidationError, match="collides with reference field"):
            EntitySpec(
                table_name="order_item",
                reference_table="order",
                fields=[{"name": name, "type": "INT"}],
            )

    def test_reference_fields_free_without_reference(self) -> None:
        """Test that the same names are allowed when there is no reference."""
        entity = EntitySpec(table_name="order_item", fields=[{"name": "order", "type": "INT"}])
        assert entity.fields[0].identifier == "Order"


class TestFragment:
    """Test Fragment immutability."""

    def test_fragment_is_frozen(self) -> None:
        """Test that fragments cannot be modified after creation."""
        fragment = Fragment(target="a.go", policy=InsertionPolicy.REPLACE, text="x")
        with pytest.raises(ValidationError):
            fragment.text = "y"


class TestScaffoldConfig:
    """Test configuration defaults and validation."""

    def test_defaults(self) -> None:
        """Test default artifact paths."""
        config = ScaffoldConfig()
        assert config.paths.registry == "models.json"
        assert config.paths.routes == "internals/routes.go"
        assert config.project_name == ""

    def test_invalid_version(self) -> None:
        """Test invalid version format."""
        with pytest.raises(ValidationError, match="Version must follow semantic versioning"):
            ScaffoldConfig(version="one")


class TestWireModels:
    """Test submission request and response shapes."""

    def test_request_aliases(self) -> None:
        """Test that camelCase wire names are accepted."""
        request = ScaffoldRequest.model_validate({
            "scaffoldData": {
                "tableName": "order",
                "refTableName": "",
                "fields": [{"name": "total", "type": "DECIMAL"}],
            },
        })
        assert request.scaffold_data.table_name == "order"
        assert request.scaffold_data.ref_table_name == ""

    def test_response_dump(self) -> None:
        """Test the success response serializes with wire names."""
        response = ScaffoldResponse(action_param="order")
        assert response.model_dump(by_alias=True) == {
            "message": "Scaffold created successfully",
            "action": "migrate",
            "actionParam": "order",
        }

    def test_result_paths_with(self) -> None:
        """Test filtering changes by action."""
        result = ScaffoldResult(
            entity="Order",
            table_name="order",
            changes=[
                {"path": "a", "action": "created"},
                {"path": "b", "action": "unchanged"},
            ],
        )
        assert result.paths_with(ChangeAction.CREATED) == ["a"]
