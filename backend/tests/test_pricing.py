from types import SimpleNamespace

import pytest

from services.pricing import apply_pricing, compute_gain, merge_priced_fields


@pytest.mark.parametrize(
    "sale, purchase, is_depot, pct, surcharge, expected",
    [
        (100, 60, False, None, 0, 40.0),
        (100, 60, False, None, 5, 35.0),
        (100, None, False, None, 0, 100.0),
        (100, 60, True, 20, 0, 20.0),       # purchase price ignored for dépôt
        (100, None, True, 20, 5, 15.0),
        (100, None, True, None, 0, 0.0),
        (50, 80, False, None, 0, -30.0),    # selling at a loss is allowed
        (10, None, True, 10, 3, -2.0),
        (19.99, 7.33, False, None, 0.5, 19.99 - 0.5 - 7.33),
    ],
)
def test_compute_gain(sale, purchase, is_depot, pct, surcharge, expected):
    assert compute_gain(sale, purchase, is_depot, pct, surcharge) == pytest.approx(expected)


def test_sub_cent_commission_is_not_rounded():
    gain = compute_gain(9.99, None, True, 33.0, 0.0)

    assert gain == pytest.approx(9.99 * (33 / 100))
    assert gain != 3.3


def test_sub_cent_owned_margin_is_not_rounded():
    assert compute_gain(10.005, 4.0, False, None, 0.0) == pytest.approx(6.005)


def test_compute_gain_treats_missing_surcharge_as_zero():
    assert compute_gain(100, 60, False, None, None) == 40.0


def test_merge_keeps_stored_values_for_omitted_fields():
    stored = SimpleNamespace(sale_price=100.0, purchase_price=60.0, is_depot=False, depot_percentage=None, surcharge=5.0)

    merged = merge_priced_fields(stored, {"sale_price": 120.0})

    assert merged.sale_price == 120.0
    assert merged.purchase_price == 60.0
    assert merged.surcharge == 5.0
    assert merged.is_depot is False


def test_merge_on_creation_defaults_to_zero():
    merged = merge_priced_fields(None, {"sale_price": 30.0})
    assert merged.purchase_price is None
    assert merged.surcharge == 0.0
    assert merged.is_depot is False


def test_apply_pricing_switching_to_depot_recomputes_gain():
    product = SimpleNamespace(
        sale_price=100.0, purchase_price=60.0, is_depot=False, depot_percentage=None, surcharge=0.0, gain=40.0,
    )

    gain = apply_pricing(product, {"is_depot": True, "depot_percentage": 25.0})

    assert gain == pytest.approx(25.0)
    assert product.gain == pytest.approx(25.0)
    assert product.is_depot is True
    assert product.purchase_price == 60.0


def test_apply_pricing_normalizes_null_surcharge():
    product = SimpleNamespace(
        sale_price=100.0, purchase_price=60.0, is_depot=False, depot_percentage=None, surcharge=5.0, gain=35.0,
    )
    apply_pricing(product, {"surcharge": None})
    assert product.surcharge == 0.0
    assert product.gain == 40.0
