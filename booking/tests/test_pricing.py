# booking/tests/test_pricing.py

from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from booking.services.pricing import (
    FIXED,
    MINIMUM,
    ON_APPLICATION,
    Price,
    as_stored_text,
    format_duration,
    format_price,
    net_service_price,
    parse_price,
    total_price,
)


def service(regular, discount=""):
    return SimpleNamespace(regular_price=regular, discount=discount)


class ParsePriceTests(SimpleTestCase):
    def test_plus_suffix_is_a_minimum(self):
        price = parse_price("45+")
        self.assertEqual(price.kind, MINIMUM)
        self.assertEqual(price.amount, Decimal("45"))
        self.assertTrue(price.has_plus)
        self.assertTrue(price.is_numeric)

    def test_poa_is_not_numeric(self):
        price = parse_price("POA")
        self.assertEqual(price.kind, ON_APPLICATION)
        self.assertFalse(price.is_numeric)
        self.assertEqual(parse_price("poa").kind, ON_APPLICATION)

    def test_plain_number(self):
        price = parse_price("30")
        self.assertEqual(price, Price(FIXED, Decimal("30")))
        self.assertFalse(price.has_plus)

    def test_numbers_and_blanks(self):
        self.assertEqual(parse_price(12).amount, Decimal("12"))
        self.assertEqual(parse_price(Decimal("12.50")).amount, Decimal("12.50"))
        self.assertEqual(parse_price(None).amount, Decimal("0"))
        self.assertEqual(parse_price("  ").amount, Decimal("0"))

    def test_unparsable_text_is_price_on_application(self):
        for raw in ["abc", "12abc+", "NaN", "Infinity"]:
            with self.subTest(raw=raw):
                self.assertEqual(parse_price(raw).kind, ON_APPLICATION)


class PriceArithmeticTests(SimpleTestCase):
    def test_net_price_keeps_plus(self):
        net = net_service_price("150+", "10")
        self.assertEqual(net, Price(MINIMUM, Decimal("140")))

    def test_totals(self):
        self.assertEqual(total_price([service("40"), service("35")]), Price(FIXED, Decimal("75")))
        self.assertEqual(total_price([service("40"), service("20+")]).kind, MINIMUM)
        self.assertEqual(total_price([service("40"), service("POA")]).kind, ON_APPLICATION)
        self.assertEqual(total_price([]), Price(FIXED, Decimal("0")))


class FormattingTests(SimpleTestCase):
    def test_as_stored_text(self):
        self.assertEqual(as_stored_text(parse_price("45")), "45")
        self.assertEqual(as_stored_text(parse_price("45.50+")), "45.5+")
        self.assertEqual(as_stored_text(parse_price("POA")), "POA")

    def test_format_price(self):
        self.assertEqual(format_price("45"), "$45.00")
        self.assertEqual(format_price("45+"), "$45.00+")
        self.assertEqual(format_price("POA"), "POA")
        self.assertEqual(format_price("10", currency_symbol="£"), "£10.00")

    def test_format_duration(self):
        self.assertEqual(format_duration(45), "45 min")
        self.assertEqual(format_duration(60), "1h")
        self.assertEqual(format_duration(90), "1h 30min")
        self.assertEqual(format_duration(None), "0 min")
