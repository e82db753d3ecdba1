"""End-to-end tests of the click CLI against a JSON store in a temp dir."""

import pytest
from click.testing import CliRunner

from salesledger.infrastructure.cli.main import cli


@pytest.fixture
def invoke(tmp_path):
    runner = CliRunner()
    env = {"SALESLEDGER_DATA_DIR": str(tmp_path), "SALESLEDGER_LOG_LEVEL": "ERROR"}

    def _invoke(*args):
        return runner.invoke(cli, list(args), env=env)

    return _invoke


@pytest.fixture
def stocked(invoke):
    assert invoke("product", "add", "--name", "Widget", "--price", "15.00", "--quantity", "10").exit_code == 0
    assert invoke("product", "add", "--name", "Gadget", "--price", "25.00", "--quantity", "2").exit_code == 0
    assert invoke("customer", "add", "--first-name", "Alice", "--last-name", "Smith",
                  "--email", "alice@example.com").exit_code == 0
    return invoke


class TestCatalogCommands:

    def test_product_add_and_list(self, invoke):
        result = invoke("product", "add", "--name", "Widget", "--price", "15.00", "--quantity", "10")
        assert result.exit_code == 0
        assert "Product #1 'Widget' added at $15.00" in result.output

        listing = invoke("product", "list")
        assert "Widget" in listing.output

    def test_empty_catalog(self, invoke):
        assert "No products found." in invoke("product", "list").output

    def test_customer_add_and_show(self, invoke):
        result = invoke("customer", "add", "--first-name", "Alice", "--email", "alice@example.com",
                        "--status", "vip")
        assert "Customer C0001 'Alice' added (status=VIP)" in result.output

        shown = invoke("customer", "show", "--id", "C0001")
        assert "not enrolled" in shown.output


class TestOrderCommands:

    def test_create_reserves_stock(self, stocked):
        result = stocked("order", "create", "--customer", "C0001", "--items", "Widget:3,Gadget:1")
        assert result.exit_code == 0
        assert "Order #1 created  (status=PENDING)" in result.output
        assert "$70.00" in result.output

        inventory = stocked("inventory", "show")
        widget = next(line for line in inventory.output.splitlines() if "Widget" in line)
        assert widget.split()[2:5] == ["10", "3", "7"]

    def test_create_with_shipping_address(self, stocked):
        result = stocked("order", "create", "--customer", "C0001", "--items", "Widget:1",
                         "--ship-name", "Alice Smith", "--ship-address", "1 Main St",
                         "--ship-city", "Springfield", "--ship-postal-code", "12345",
                         "--ship-country", "US")
        assert result.exit_code == 0, result.output

        shown = stocked("order", "show", "--id", "1")
        assert "Ship to:  Alice Smith, 1 Main St, Springfield, 12345, US" in shown.output

    def test_partial_shipping_address_rejected(self, stocked):
        result = stocked("order", "create", "--customer", "C0001", "--items", "Widget:1",
                         "--ship-city", "Springfield")
        assert result.exit_code == 2
        assert "must be given together" in result.output

    def test_insufficient_stock_reported(self, stocked):
        result = stocked("order", "create", "--customer", "C0001", "--items", "Gadget:5")
        assert result.exit_code == 1
        assert "[INSUFFICIENT_STOCK]" in result.output

    def test_lifecycle_to_delivery(self, stocked):
        stocked("order", "create", "--customer", "C0001", "--items", "Widget:2")
        for status in ("confirmed", "processing", "shipped", "delivered"):
            result = stocked("order", "status", "--id", "1", "--to", status)
            assert result.exit_code == 0, result.output

        shown = stocked("order", "show", "--id", "1")
        assert "status=DELIVERED" in shown.output
        assert "Timeline:" in shown.output
        listing = stocked("product", "list")
        widget = next(line for line in listing.output.splitlines() if "Widget" in line)
        assert widget.split()[-1] == "2"

    def test_invalid_transition_reported(self, stocked):
        stocked("order", "create", "--customer", "C0001", "--items", "Widget:2")
        result = stocked("order", "status", "--id", "1", "--to", "shipped")
        assert result.exit_code == 1
        assert "[INVALID_TRANSITION]" in result.output

    def test_pay(self, stocked):
        stocked("order", "create", "--customer", "C0001", "--items", "Widget:2")
        result = stocked("order", "pay", "--id", "1")
        assert "payment=PAID" in result.output

    def test_offline_sale(self, stocked):
        result = stocked("order", "offline", "--first-name", "Eve", "--items", "Widget:4@12.50",
                         "--payment-method", "card")
        assert result.exit_code == 0, result.output
        assert "Offline sale recorded as order #1" in result.output
        assert "$50.00" in result.output

    def test_show_missing_order(self, stocked):
        result = stocked("order", "show", "--id", "99")
        assert result.exit_code == 1
        assert "[ORDER_NOT_FOUND]" in result.output

    def test_malformed_items(self, stocked):
        result = stocked("order", "create", "--customer", "C0001", "--items", "Widget")
        assert result.exit_code == 2
        assert "Expected 'Product:Quantity'" in result.output

    def test_expire_stale_with_nothing_to_do(self, stocked):
        stocked("order", "create", "--customer", "C0001", "--items", "Widget:2")
        result = stocked("order", "expire-stale")
        assert "0 cancelled, 0 skipped, 0 failed." in result.output


class TestInventoryCommands:

    def test_adjust(self, stocked):
        result = stocked("inventory", "adjust", "--product", "1", "--quantity", "5",
                         "--operation", "add", "--reason", "Restock")
        assert result.exit_code == 0
        assert "available 10 -> 15 (+5)" in result.output

    def test_bulk_adjust_reports_each_item(self, stocked):
        result = stocked("inventory", "bulk-adjust", "--items", "1:subtract:3,2:subtract:9,7:add:1")
        assert "OK    #1: available 10 -> 7" in result.output
        assert "[INSUFFICIENT_STOCK]" in result.output
        assert "[PRODUCT_NOT_FOUND]" in result.output
        assert "1 applied, 2 failed." in result.output
