from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

from facturo.app.services.billing import (
    REF_PREFIXES,
    calculate_invoice_totals,
    calculate_line_totals,
    generate_ref,
)


def line(price, quantity, discount=0, tax=0):
    return SimpleNamespace(price=price, quantity=quantity, discount=discount, tax=tax)


def test_line_totals_apply_discount_then_tax():
    line_ht, line_ttc = calculate_line_totals(Decimal("100.00"), Decimal("2"), discount=10, tax=22)
    assert line_ht == Decimal("180")
    assert line_ttc == Decimal("219.6")


def test_invoice_totals_sum_lines_and_round():
    total_ht, total = calculate_invoice_totals(
        [
            line(Decimal("100.00"), Decimal("2"), discount=10, tax=22),
            line(Decimal("33.33"), Decimal("1"), tax=3),
        ]
    )
    assert total_ht == Decimal("213.33")
    assert total == Decimal("253.93")


def test_invoice_totals_of_no_items_are_zero():
    assert calculate_invoice_totals([]) == (Decimal("0.00"), Decimal("0.00"))


def test_missing_discount_and_tax_count_as_zero():
    total_ht, total = calculate_invoice_totals([line(Decimal("10"), Decimal("3"), discount=None, tax=None)])
    assert total_ht == total == Decimal("30.00")


def test_generate_ref_format():
    ref = generate_ref("INV", now=datetime(2030, 4, 2, tzinfo=timezone.utc))
    prefix, period, number = ref.split("-")
    assert prefix == "INV"
    assert period == "203004"
    assert len(number) == 4 and number.isdigit()


def test_each_document_type_has_its_prefix():
    assert REF_PREFIXES == {"invoice": "INV", "avoir": "AVR", "devis": "DEV"}
