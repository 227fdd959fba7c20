"""Tests for statuses, roles, money and signatures."""

from __future__ import annotations

import hashlib
import hmac
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from storefront.auth import Role, User
from storefront.orders import OrderPage, OrderStatus, PaymentStatus, SummaryWindow, percent_change
from storefront.payments import sign, to_minor_units, verify

from conftest import make_address


class TestOrderStatus:
    @pytest.mark.parametrize("raw", ["shipped", "SHIPPED", " Shipped "])
    def test_parse_any_casing(self, raw):
        assert OrderStatus.parse(raw) is OrderStatus.SHIPPED

    @pytest.mark.parametrize("raw", [None, "", "fulfilled", "ship"])
    def test_parse_rejects_non_members(self, raw):
        assert OrderStatus.parse(raw) is None

    def test_legacy_is_upper_case(self):
        assert OrderStatus.PROCESSING.legacy == "PROCESSING"
        assert OrderStatus.parse(OrderStatus.PROCESSING.legacy) is OrderStatus.PROCESSING

    def test_terminal_statuses(self):
        terminal = {s for s in OrderStatus if s.is_terminal}
        assert terminal == {
            OrderStatus.DELIVERED,
            OrderStatus.COMPLETED,
            OrderStatus.CANCELLED,
            OrderStatus.FAILED,
        }

    def test_tracking_only_from_shipped(self):
        assert OrderStatus.SHIPPED.allows_tracking
        assert OrderStatus.DELIVERED.allows_tracking
        assert not OrderStatus.PROCESSING.allows_tracking
        assert not OrderStatus.PENDING.allows_tracking

    def test_payment_status_parse(self):
        assert PaymentStatus.parse("COMPLETED") is PaymentStatus.COMPLETED
        assert PaymentStatus.parse("refunded") is None


class TestRole:
    def test_default_role_is_user(self):
        assert User(id="u", email="u@example.com").role is Role.USER

    def test_customer_is_legacy_user(self):
        assert Role.parse("customer") is Role.USER
        assert Role.parse("CUSTOMER") is Role.USER

    def test_parse(self):
        assert Role.parse("Warehouse") is Role.WAREHOUSE
        assert Role.parse("superuser") is None

    def test_staff(self):
        assert User(id="u", email="e@x", role=Role.MANAGER).is_staff
        assert not User(id="u", email="e@x").is_staff


class TestMinorUnits:
    @pytest.mark.parametrize(
        ("amount", "currency", "expected"),
        [
            (Decimal("1500.00"), "INR", 150000),
            (Decimal("19.99"), "usd", 1999),
            (Decimal("1500"), "JPY", 1500),
            (Decimal("1.234"), "KWD", 1234),
            (Decimal("0.005"), "INR", 1),
        ],
    )
    def test_conversion(self, amount, currency, expected):
        assert to_minor_units(amount, currency) == expected


class TestSignature:
    def test_matches_hmac_sha256_hex(self):
        expected = hmac.new(b"secret", b"rzp_abc|pay_1", hashlib.sha256).hexdigest()
        assert sign("secret", "rzp_abc", "pay_1") == expected

    def test_verify(self):
        signature = sign("secret", "rzp_abc", "pay_1")
        assert verify("secret", "rzp_abc", "pay_1", signature)
        assert verify("secret", "rzp_abc", "pay_1", signature.upper())

    @pytest.mark.parametrize(
        ("secret", "order_id", "payment_id"),
        [
            ("other", "rzp_abc", "pay_1"),
            ("secret", "rzp_xyz", "pay_1"),
            ("secret", "rzp_abc", "pay_2"),
        ],
    )
    def test_any_changed_input_fails(self, secret, order_id, payment_id):
        signature = sign("secret", "rzp_abc", "pay_1")
        assert not verify(secret, order_id, payment_id, signature)

    def test_order_of_fields_matters(self):
        signature = sign("secret", "pay_1", "rzp_abc")
        assert not verify("secret", "rzp_abc", "pay_1", signature)

    @pytest.mark.parametrize("signature", ["é" * 64, "签名", "\ud800" * 64, ""])
    def test_non_hex_text_is_a_mismatch(self, signature):
        assert verify("secret", "rzp_abc", "pay_1", signature) is False


class TestPagination:
    def test_middle_page(self):
        page = OrderPage(orders=(), page=2, limit=10, total_orders=25)
        assert page.total_pages == 3
        assert page.has_next_page
        assert page.has_prev_page

    def test_last_page(self):
        page = OrderPage(orders=(), page=3, limit=10, total_orders=25)
        assert not page.has_next_page

    def test_empty(self):
        page = OrderPage(orders=(), page=1, limit=10, total_orders=0)
        assert page.total_pages == 0
        assert not page.has_next_page
        assert not page.has_prev_page


class TestSummaryWindow:
    NOW = datetime(2026, 3, 10, 15, 30, 12, tzinfo=UTC)

    def test_starts(self):
        assert SummaryWindow.DAY.start(self.NOW) == datetime(2026, 3, 10, tzinfo=UTC)
        assert SummaryWindow.WEEK.start(self.NOW) == self.NOW - timedelta(days=7)
        assert SummaryWindow.MONTH.start(self.NOW) == self.NOW - timedelta(days=30)
        assert SummaryWindow.YEAR.start(self.NOW) == self.NOW - timedelta(days=365)

    def test_parse(self):
        assert SummaryWindow.parse(" Month ") is SummaryWindow.MONTH
        assert SummaryWindow.parse("fortnight") is None
        assert SummaryWindow.parse(None) is None

    @pytest.mark.parametrize(
        ("current", "previous", "expected"),
        [
            ("0", "0", 0),
            ("5", "0", 100),
            ("3", "2", 50),
            ("1", "3", -67),
            ("1", "8", -88),
            ("2", "2", 0),
        ],
    )
    def test_percent_change(self, current, previous, expected):
        assert percent_change(Decimal(current), Decimal(previous)) == expected


def test_address_missing_fields():
    assert make_address().missing_fields() == ()
    assert make_address(city="", phone="  ").missing_fields() == ("city", "phone")
