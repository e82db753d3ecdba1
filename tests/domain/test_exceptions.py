"""Tests for the coded domain errors."""

from salesledger.domain.exceptions import (
    DomainException,
    InsufficientStockError,
    ProductNotFoundError,
)


class TestToDict:

    def test_carries_code_and_message(self):
        assert ProductNotFoundError("7").to_dict() == {
            "code": "PRODUCT_NOT_FOUND",
            "message": "Product '7' not found",
        }

    def test_subclass_code_overrides_base(self):
        error = InsufficientStockError("Widget", 5, 2)
        assert error.to_dict()["code"] == "INSUFFICIENT_STOCK"
        assert "Widget" in error.to_dict()["message"]

    def test_base_error(self):
        assert DomainException("boom").to_dict() == {"code": "DOMAIN_ERROR", "message": "boom"}
