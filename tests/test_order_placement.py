"""Tests for order placement, totals and product snapshots."""

from decimal import Decimal

import pytest
from sqlmodel import select

from storefront.errors import (
    InvalidTransitionError,
    NotServiceableError,
    OrderNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from storefront.models.order import Order
from storefront.models.order_item import OrderItem
from storefront.models.product import Product
from storefront.schemas.address_schemas import ShippingAddress
from storefront.schemas.orders_schemas import OrderItemCreate, PlaceOrderRequest
from storefront.schemas.settings_schemas import SiteConfig
from storefront.services.order_service import (
    cancel_customer_order,
    customer_orders_query,
    find_guest_order,
    generate_order_number,
    get_order_items,
    place_order,
)
from storefront.services.order_status_service import apply_status_change
from storefront.services.order_tracking_service import get_tracking_history

from conftest import FIXED_NOW


def make_request(product, address, quantity=1, **extra):
    return PlaceOrderRequest(
        items=[OrderItemCreate(product_id=product.id, quantity=quantity)],
        shipping_address=address,
        payment_method="razorpay",
        **extra,
    )


class TestTotals:
    def test_kashmir_order_totals(self, placed_order):
        assert placed_order.subtotal == Decimal("1500.00")
        assert placed_order.tax == Decimal("270.00")
        assert placed_order.shipping == Decimal("50.00")
        assert placed_order.discount == Decimal("0.00")
        assert placed_order.total == Decimal("1820.00")
        assert placed_order.shipping_zone_id == "kashmir"

    def test_free_shipping_over_threshold(self, session, attar, customer, srinagar_address, site_config):
        order = place_order(
            session, make_request(attar, srinagar_address, quantity=2), site_config,
            user=customer, now=FIXED_NOW,
        )
        assert order.subtotal == Decimal("3000.00")
        assert order.shipping == Decimal("0.00")
        assert order.total == Decimal("3540.00")

    def test_discount_reduces_total(self, session, attar, customer, mumbai_address, site_config):
        order = place_order(
            session, make_request(attar, mumbai_address, discount=Decimal("100")),
            site_config, user=customer, now=FIXED_NOW,
        )
        # 1500 + 270 tax + 100 shipping - 100 discount
        assert order.total == Decimal("1770.00")
        assert order.shipping_zone_id == "india"

    def test_total_is_sum_of_rounded_parts(self, session, customer, srinagar_address):
        product = Product(name="Saffron Sample", price=Decimal("33.33"), stock=5)
        session.add(product)
        session.commit()
        session.refresh(product)

        order = place_order(
            session, make_request(product, srinagar_address), SiteConfig(tax_rate=Decimal("0.05")),
            user=customer, now=FIXED_NOW,
        )
        assert order.tax == Decimal("1.67")
        assert order.total == order.subtotal + order.tax + order.shipping - order.discount

    def test_tax_rate_comes_from_site_config(self, session, attar, customer, srinagar_address):
        order = place_order(
            session, make_request(attar, srinagar_address), SiteConfig(tax_rate=Decimal("0")),
            user=customer, now=FIXED_NOW,
        )
        assert order.tax == Decimal("0.00")
        assert order.total == Decimal("1550.00")


class TestPlacementRecords:
    def test_initial_state_and_tracking_entry(self, session, placed_order, customer):
        assert placed_order.status == "pending"
        assert placed_order.payment_status == "pending"
        assert placed_order.version == 1

        history = get_tracking_history(session, placed_order.id)
        assert len(history) == 1
        assert history[0].status == "pending"
        assert history[0].message == "Order has been placed"
        assert history[0].created_by == customer.id
        assert history[0].created_at == FIXED_NOW

    def test_order_number_format(self):
        number = generate_order_number(FIXED_NOW)
        assert number.startswith("ORD-20250115-")
        assert len(number.split("-")[2]) == 8

    def test_stock_is_reserved(self, session, placed_order, attar):
        session.refresh(attar)
        assert attar.stock == 9

    def test_address_snapshot_stored(self, placed_order):
        assert placed_order.shipping_address["city"] == "Srinagar"
        assert placed_order.billing_address == placed_order.shipping_address


class TestProductSnapshot:
    def test_snapshot_fields(self, session, placed_order, attar):
        item = get_order_items(session, placed_order.id)[0]

        assert item.unit_price == Decimal("1500.00")
        assert item.line_total == Decimal("1500.00")
        assert item.product_snapshot["name"] == "Kashmiri Rose Attar"
        assert item.product_snapshot["sku"] == "ATR-ROSE-12"
        assert item.product_snapshot["images"] == ["https://cdn.example.com/rose-attar.jpg"]
        assert item.product_snapshot["price"] == 1500.0

    def test_catalog_edit_does_not_touch_snapshot(self, session, placed_order, attar):
        attar.name = "Rose Attar (new label)"
        attar.price = Decimal("1999.00")
        session.add(attar)
        session.commit()

        item = get_order_items(session, placed_order.id)[0]
        assert item.product_snapshot["name"] == "Kashmiri Rose Attar"
        assert item.unit_price == Decimal("1500.00")

        session.refresh(placed_order)
        assert placed_order.total == Decimal("1820.00")

    def test_snapshot_survives_product_deletion(self, session, placed_order, attar):
        product_id = attar.id
        for item in session.exec(select(OrderItem).where(OrderItem.product_id == product_id)):
            item.product_id = None
            session.add(item)
        session.delete(attar)
        session.commit()

        item = get_order_items(session, placed_order.id)[0]
        assert item.product_id is None
        assert item.product_snapshot["id"] == product_id
        assert item.product_snapshot["name"] == "Kashmiri Rose Attar"


class TestPlacementValidation:
    def test_guest_requires_contact_details(self, session, attar, srinagar_address, site_config):
        with pytest.raises(ValidationError) as exc_info:
            place_order(session, make_request(attar, srinagar_address), site_config)
        assert exc_info.value.field == "guest_email"

    def test_guest_order(self, session, attar, srinagar_address, site_config):
        order = place_order(
            session,
            make_request(
                attar, srinagar_address,
                guest_email="Guest@Example.com", guest_name="Guest Buyer",
            ),
            site_config,
            now=FIXED_NOW,
        )
        assert order.user_id is None
        assert find_guest_order(session, order.order_number, "guest@example.com").id == order.id

    def test_guest_lookup_with_wrong_email(self, session, placed_order):
        with pytest.raises(OrderNotFoundError):
            find_guest_order(session, placed_order.order_number, "someone@else.com")

    def test_registered_user_lookup_by_account_email(self, session, placed_order):
        found = find_guest_order(session, placed_order.order_number, " AISHA@example.com ")
        assert found.id == placed_order.id

    def test_empty_items_rejected(self, session, customer, srinagar_address, site_config):
        payload = PlaceOrderRequest(
            items=[], shipping_address=srinagar_address, payment_method="cod"
        )
        with pytest.raises(ValidationError):
            place_order(session, payload, site_config, user=customer)

    def test_unknown_product(self, session, customer, srinagar_address, site_config):
        payload = PlaceOrderRequest(
            items=[OrderItemCreate(product_id=999, quantity=1)],
            shipping_address=srinagar_address,
            payment_method="cod",
        )
        with pytest.raises(ProductNotFoundError):
            place_order(session, payload, site_config, user=customer)

    def test_insufficient_stock_leaves_nothing_behind(
        self, session, attar, customer, srinagar_address, site_config
    ):
        with pytest.raises(ValidationError) as exc_info:
            place_order(
                session, make_request(attar, srinagar_address, quantity=11), site_config,
                user=customer,
            )
        assert "Insufficient stock" in exc_info.value.message

        assert session.exec(select(Order)).all() == []
        session.refresh(attar)
        assert attar.stock == 10

    def test_unserviceable_address_blocks_order(self, session, attar, customer, site_config):
        address = ShippingAddress(
            city="Somewhere", state="Nowhere", country="Unlisted Country", postal_code="0000"
        )
        with pytest.raises(NotServiceableError):
            place_order(session, make_request(attar, address), site_config, user=customer)
        assert session.exec(select(Order)).all() == []

    def test_invalid_address_rejected(self, session, attar, customer, site_config):
        address = ShippingAddress(city="Srinagar", state="Kashmir", country="India", postal_code="19")
        with pytest.raises(ValidationError) as exc_info:
            place_order(session, make_request(attar, address), site_config, user=customer)
        assert exc_info.value.field == "shipping_address"

    def test_discount_above_subtotal_rejected(
        self, session, attar, customer, srinagar_address, site_config
    ):
        with pytest.raises(ValidationError) as exc_info:
            place_order(
                session, make_request(attar, srinagar_address, discount=Decimal("1600")),
                site_config, user=customer,
            )
        assert exc_info.value.field == "discount"


class TestCustomerCancel:
    def test_cancel_writes_tracking_entry(self, session, placed_order, customer):
        change = cancel_customer_order(session, placed_order, customer, now=FIXED_NOW)

        assert change.order.status == "cancelled"
        assert change.order.payment_status == "pending"
        assert [e.status for e in get_tracking_history(session, placed_order.id)] == [
            "pending", "cancelled",
        ]

    def test_only_pending_orders(self, session, placed_order, customer):
        apply_status_change(session, placed_order, "processing", now=FIXED_NOW)

        with pytest.raises(InvalidTransitionError):
            cancel_customer_order(session, placed_order, customer)

    def test_only_the_owner(self, session, placed_order, admin):
        with pytest.raises(OrderNotFoundError):
            cancel_customer_order(session, placed_order, admin)

    def test_customer_orders_query_filters_by_user(self, session, placed_order, customer, admin):
        assert session.exec(customer_orders_query(customer.id)).all() == [placed_order]
        assert session.exec(customer_orders_query(admin.id)).all() == []
