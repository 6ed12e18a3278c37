# backend/services/pricing.py
"""
Gain computation for products.

The shop earns money in two ways:

* owned stock: it bought the article and resells it,
  ``gain = sale_price - surcharge - purchase_price``
* dépôt (consignment): a co-client left the article, the shop keeps a
  percentage of the sale price,
  ``gain = sale_price * depot_percentage / 100 - surcharge``

The purchase price is ignored for dépôt products. A negative gain is a valid
result and is stored as is.
"""
from dataclasses import dataclass
from typing import Any, Mapping, Optional

# Product attributes that feed the gain formula
PRICED_FIELDS = ("sale_price", "purchase_price", "is_depot", "depot_percentage", "surcharge")


@dataclass(frozen=True)
class PricedFields:
    sale_price: float
    purchase_price: Optional[float]
    is_depot: bool
    depot_percentage: Optional[float]
    surcharge: float = 0.0


def compute_gain(
    sale_price: float,
    purchase_price: Optional[float],
    is_depot: bool,
    depot_percentage: Optional[float],
    surcharge: Optional[float] = 0.0,
) -> float:
    sale_price = sale_price or 0.0
    surcharge = surcharge or 0.0

    if is_depot:
        gain = sale_price * ((depot_percentage or 0.0) / 100) - surcharge
    else:
        gain = sale_price - surcharge - (purchase_price or 0.0)

    return gain


def merge_priced_fields(current: Any, incoming: Mapping[str, Any]) -> PricedFields:
    """
    Combine the stored values of a product with the fields sent by the caller.

    `current` is the ORM object (or None on creation), `incoming` only holds the
    keys the caller actually set, so omitted fields keep their stored value.
    """
    merged = {}
    for field in PRICED_FIELDS:
        if field in incoming:
            merged[field] = incoming[field]
        else:
            merged[field] = getattr(current, field, None) if current is not None else None

    return PricedFields(
        sale_price=merged["sale_price"] or 0.0,
        purchase_price=merged["purchase_price"],
        is_depot=bool(merged["is_depot"]),
        depot_percentage=merged["depot_percentage"],
        surcharge=merged["surcharge"] or 0.0,
    )


def apply_pricing(product: Any, incoming: Mapping[str, Any]) -> float:
    """Write the incoming values onto `product` and refresh its gain."""
    fields = merge_priced_fields(product, incoming)

    for key, value in incoming.items():
        setattr(product, key, value)
    product.surcharge = fields.surcharge
    product.gain = compute_gain(
        fields.sale_price,
        fields.purchase_price,
        fields.is_depot,
        fields.depot_percentage,
        fields.surcharge,
    )
    return product.gain
