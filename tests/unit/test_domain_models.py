"""
Unit tests for purchase order and inventory domain models.
"""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from supply_chain.domain.models import (
    OrderStatus, PurchaseOrder, NewPurchaseOrder, ResourceStatus, ACTIONABLE_STATUSES, ACTIVE_STATUSES
)


def _order(**overrides) -> PurchaseOrder:
    fields = dict(
        id=1,
        order_id="ext-1",
        quantity=10,
        order_date=datetime.now(timezone.utc),
        unit_price=7,
        seller_bank_account="SUPPLIER-ACC",
        origin="thoh",
        status=OrderStatus.REQUIRES_PAYMENT_TO_SUPPLIER.value,
        raw_material_id=1,
        raw_material_name="sand"
    )
    fields.update(overrides)
    return PurchaseOrder(**fields)


@pytest.mark.unit
class TestOrderStatus:
    """Tests for status parsing and grouping."""

    def test_parse_known_status(self):
        assert OrderStatus.parse("requires_delivery") is OrderStatus.REQUIRES_DELIVERY

    def test_parse_unknown_status_returns_none(self):
        assert OrderStatus.parse("collected_twice") is None

    def test_waiting_delivery_is_active_but_not_actionable(self):
        assert OrderStatus.WAITING_FOR_DELIVERY in ACTIVE_STATUSES
        assert OrderStatus.WAITING_FOR_DELIVERY not in ACTIONABLE_STATUSES


@pytest.mark.unit
class TestPurchaseOrder:
    """Tests for PurchaseOrder business rules."""

    def test_total_price(self):
        assert _order(quantity=10, unit_price=7).total_price == 70

    def test_remaining_quantity(self):
        assert _order(quantity=10, quantity_delivered=4).remaining_quantity == 6

    def test_material_order_classification(self):
        order = _order()
        assert order.is_material_order()
        assert not order.is_equipment_order()
        assert order.has_valid_classification()

    def test_equipment_order_classification(self):
        order = _order(raw_material_id=None, raw_material_name=None, equipment_order=True)
        assert order.is_equipment_order()
        assert order.has_valid_classification()

    def test_neither_material_nor_equipment_is_invalid(self):
        order = _order(raw_material_id=None, raw_material_name=None, equipment_order=False)
        assert not order.has_valid_classification()

    def test_both_material_and_equipment_is_invalid(self):
        order = _order(equipment_order=True)
        assert not order.has_valid_classification()

    def test_new_order_requires_positive_quantity(self):
        with pytest.raises(ValidationError):
            NewPurchaseOrder(
                order_id="ext-1", quantity=0, unit_price=5, seller_bank_account="acc", origin="thoh"
            )


@pytest.mark.unit
class TestResourceStatus:
    """Tests for reorder threshold evaluation."""

    def test_total_includes_incoming(self):
        status = ResourceStatus(current=100, incoming=40, target=1000, reorder_point=150)
        assert status.total == 140

    def test_needs_reorder_at_reorder_point(self):
        status = ResourceStatus(current=100, incoming=50, target=1000, reorder_point=150)
        assert status.needs_reorder

    def test_incoming_stock_prevents_reorder(self):
        status = ResourceStatus(current=100, incoming=500, target=1000, reorder_point=150)
        assert not status.needs_reorder

    def test_zero_reorder_point_with_nothing_on_hand(self):
        status = ResourceStatus(current=0, incoming=0, target=2, reorder_point=0)
        assert status.needs_reorder
