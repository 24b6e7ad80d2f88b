import unittest
from decimal import Decimal

from storefront.pricing import compute_discount, format_price, to_decimal, truncate_text


class PricingTests(unittest.TestCase):
    def test_to_decimal(self):
        self.assertEqual(to_decimal("1234.5"), Decimal("1234.50"))
        self.assertEqual(to_decimal("R$ 1.234,56"), Decimal("1234.56"))
        self.assertEqual(to_decimal(99.9), Decimal("99.90"))
        self.assertEqual(to_decimal("0.005"), Decimal("0.01"))
        for bad in ("abc", "NaN", "Infinity", "1e30", True):
            with self.assertRaises(ValueError):
                to_decimal(bad)

    def test_format_price(self):
        self.assertEqual(format_price(1234.5), "R$ 1.234,50")
        self.assertEqual(format_price(Decimal("99.9")), "R$ 99,90")
        self.assertEqual(format_price(1000000), "R$ 1.000.000,00")
        self.assertEqual(format_price(0), "R$ 0,00")
        self.assertEqual(format_price(None), "R$ 0,00")

    def test_compute_discount(self):
        self.assertEqual(compute_discount(99.9, 149.9), "33% OFF")
        self.assertEqual(compute_discount(50, 100), "50% OFF")
        # 12.5% rounds half up
        self.assertEqual(compute_discount(87.5, 100), "13% OFF")
        self.assertIsNone(compute_discount(100, 100))
        self.assertIsNone(compute_discount(120, 100))
        self.assertIsNone(compute_discount(100, None))

    def test_truncate_text(self):
        self.assertEqual(truncate_text(None), "Produto MJ TECH")
        self.assertEqual(truncate_text("curto"), "curto")
        self.assertEqual(truncate_text("a" * 120), "a" * 100 + "...")


if __name__ == "__main__":
    unittest.main()
