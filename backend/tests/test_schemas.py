"""
HomeStock Backend — Stock Schema Validation Tests
===================================================

What:  Tests for StockCreate / StockUpdate validation via parse_fields.
Why:   These rules decide what is rejected before any upload or write.
"""

import pytest

from homestock.exceptions import ValidationError
from homestock.schemas.stock import StockCreate, StockUpdate, parse_fields

VALID = {
    "name": "Rice",
    "category": "Grains",
    "quantity": "2",
    "user": "a" * 24,
}


class TestStockCreate:

    def test_unit_defaults_to_units(self):
        data = parse_fields(StockCreate, VALID)
        assert data.unit == "units"
        assert data.quantity == 2.0
        assert data.image is None

    def test_enum_values_are_plain_strings(self):
        data = parse_fields(StockCreate, {**VALID, "unit": "kg"})
        assert data.category == "Grains"
        assert data.unit == "kg"
        assert type(data.unit) is str

    def test_category_outside_enum_rejected(self):
        with pytest.raises(ValidationError, match="category"):
            parse_fields(StockCreate, {**VALID, "category": "Snacks"})

    def test_unit_outside_enum_rejected(self):
        with pytest.raises(ValidationError, match="unit"):
            parse_fields(StockCreate, {**VALID, "unit": "pounds"})

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError, match="quantity"):
            parse_fields(StockCreate, {**VALID, "quantity": "-1"})

    def test_zero_quantity_allowed(self):
        assert parse_fields(StockCreate, {**VALID, "quantity": "0"}).quantity == 0

    def test_non_numeric_quantity_rejected(self):
        with pytest.raises(ValidationError, match="quantity"):
            parse_fields(StockCreate, {**VALID, "quantity": "lots"})

    @pytest.mark.parametrize("quantity", ["inf", "1e400", "nan", "-inf"])
    def test_non_finite_quantity_rejected(self, quantity):
        with pytest.raises(ValidationError, match="quantity"):
            parse_fields(StockCreate, {**VALID, "quantity": quantity})

    @pytest.mark.parametrize("missing", ["name", "category", "quantity", "user"])
    def test_required_fields(self, missing):
        fields = {k: v for k, v in VALID.items() if k != missing}
        with pytest.raises(ValidationError, match=missing):
            parse_fields(StockCreate, fields)

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError, match="name"):
            parse_fields(StockCreate, {**VALID, "name": ""})

    def test_camel_case_and_snake_case_dates(self):
        camel = parse_fields(StockCreate, {**VALID, "expirationDate": "2026-12-31"})
        snake = parse_fields(StockCreate, {**VALID, "expiration_date": "2026-12-31"})
        assert camel.expiration_date == snake.expiration_date
        assert camel.expiration_date.year == 2026

    def test_blank_expiration_date_is_none(self):
        data = parse_fields(StockCreate, {**VALID, "expirationDate": ""})
        assert data.expiration_date is None

    def test_server_managed_fields_ignored(self):
        data = parse_fields(
            StockCreate, {**VALID, "id": "x" * 24, "addedDate": "2000-01-01"}
        )
        assert "id" not in data.model_dump()
        assert "added_date" not in data.model_dump()

    def test_error_lists_every_problem(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_fields(StockCreate, {**VALID, "category": "Snacks", "quantity": "-3"})
        assert "category" in exc_info.value.detail
        assert "quantity" in exc_info.value.detail
        assert len(exc_info.value.context["errors"]) == 2


class TestStockUpdate:

    def test_only_supplied_fields_are_changes(self):
        data = parse_fields(StockUpdate, {"quantity": "7"})
        assert data.changes() == {"quantity": 7.0}

    def test_empty_update_has_no_changes(self):
        assert parse_fields(StockUpdate, {}).changes() == {}

    def test_supplied_fields_still_validated(self):
        with pytest.raises(ValidationError, match="category"):
            parse_fields(StockUpdate, {"category": "Candy"})
        with pytest.raises(ValidationError, match="quantity"):
            parse_fields(StockUpdate, {"quantity": "-0.5"})
        with pytest.raises(ValidationError, match="quantity"):
            parse_fields(StockUpdate, {"quantity": "inf"})

    def test_required_field_cannot_be_cleared(self):
        with pytest.raises(ValidationError, match="name cannot be null"):
            parse_fields(StockUpdate, {"name": None})

    def test_optional_field_can_be_cleared(self):
        data = parse_fields(StockUpdate, {"notes": None})
        assert data.changes() == {"notes": None}

    def test_assigned_image_becomes_a_change(self):
        data = parse_fields(StockUpdate, {"notes": "ripe"})
        data.image = "https://example.com/homestock/new.jpg"
        assert data.changes() == {
            "notes": "ripe",
            "image": "https://example.com/homestock/new.jpg",
        }
