from datetime import date, datetime

import pytest
from fastapi import HTTPException

from routes.stats import resolve_date_range


def test_explicit_range_includes_end_day():
    start, end = resolve_date_range(date(2024, 1, 1), date(2024, 12, 31), "month")
    assert start == datetime(2024, 1, 1)
    assert end == datetime(2025, 1, 1)


def test_period_windows():
    now = datetime(2026, 5, 17, 14, 30)
    assert resolve_date_range(None, None, "month", now=now) == (datetime(2026, 5, 1), now)
    assert resolve_date_range(None, None, "year", now=now) == (datetime(2026, 1, 1), now)
    assert resolve_date_range(None, None, "all", now=now) is None
    assert resolve_date_range(None, None, None, now=now) is None
    # a lone start date falls back to the period
    assert resolve_date_range(date(2020, 1, 1), None, None, now=now) is None


def test_reversed_range_is_rejected():
    with pytest.raises(HTTPException):
        resolve_date_range(date(2024, 2, 1), date(2024, 1, 1), None)


@pytest.fixture()
def sales(client, auth_headers, make_category, make_product, make_client):
    strollers = make_category(name="Poussettes")["id"]
    clothes = make_category(name="Vêtements")["id"]
    owned = make_product(category_id=strollers, name="Poussette", salePrice=300, purchasePrice=200, surcharge=10)
    depot = make_product(category_id=strollers, name="Lit", salePrice=150, isDepot=True, depotPercentage=20)
    body = make_product(category_id=clothes, name="Body", salePrice=20, purchasePrice=5)
    buyer = make_client()

    def order(products, status="NOT_DELIVERED", address="Tunis"):
        res = client.post("/commands", headers=auth_headers, json={
            "productIds": [p["id"] for p in products], "clientId": buyer["id"],
            "deliveryAddress": address, "status": status,
        })
        assert res.status_code == 201, res.text

    order([owned, body], status="DELIVERED")
    order([depot], status="GOT_PROFIT", address="Sfax")
    order([body])
    return {"strollers": strollers, "clothes": clothes}


def _get(client, auth_headers, path, **params):
    res = client.get(f"/stats/{path}", headers=auth_headers, params=params)
    assert res.status_code == 200, res.text
    return res.json()


def test_kpis(client, auth_headers, sales):
    kpis = _get(client, auth_headers, "kpis")

    assert kpis["totalProducts"] == 3
    assert kpis["totalCommands"] == 3
    assert kpis["totalClients"] == 1
    assert kpis["totalCoClients"] == 0
    assert kpis["totalRevenue"] == 320 + 150 + 20
    assert kpis["totalPurchaseCost"] == 205 + 0 + 5
    assert kpis["totalProfit"] == 490 - 210
    assert kpis["deliveredCommands"] == 1
    assert kpis["profitCommands"] == 1
    assert kpis["avgOrderValue"] == round(490 / 3, 2)


def test_kpis_category_filter_applies_to_products(client, auth_headers, sales):
    assert _get(client, auth_headers, "kpis", categoryId=sales["clothes"])["totalProducts"] == 1


def test_distributions(client, auth_headers, sales):
    by_category = {c["categoryName"]: c["count"] for c in _get(client, auth_headers, "products-by-category")}
    assert by_category == {"Poussettes": 2, "Vêtements": 1}

    by_status = {s["status"]: s["count"] for s in _get(client, auth_headers, "commands-by-status")}
    assert by_status == {"NOT_DELIVERED": 1, "DELIVERED": 1, "GOT_PROFIT": 1}

    assert _get(client, auth_headers, "depot-vs-buying") == {"depot": 1, "buying": 2, "total": 3}


def test_monthly_series(client, auth_headers, sales):
    revenue = _get(client, auth_headers, "monthly-revenue")
    assert len(revenue) == 1
    assert revenue[0]["revenue"] == 490

    profit = _get(client, auth_headers, "monthly-profit")[0]
    assert (profit["revenue"], profit["cost"], profit["profit"]) == (490, 210, 280)

    sold = _get(client, auth_headers, "monthly-sold-products")
    assert len(sold) == 12
    assert sum(m["count"] for m in sold) == 4


def test_top_products(client, auth_headers, sales):
    top = _get(client, auth_headers, "top-products", limit=2)

    assert [p["productName"] for p in top] == ["Poussette", "Lit"]
    assert top[0]["rank"] == 1
    assert top[0]["categoryName"] == "Poussettes"

    body = next(p for p in _get(client, auth_headers, "top-products") if p["productName"] == "Body")
    assert body["count"] == 2
    assert body["totalValue"] == 40


def test_revenue_breakdown_and_surcharge(client, auth_headers, sales):
    breakdown = _get(client, auth_headers, "revenue-breakdown")
    # owned: (300 - 200) + (20 - 5), dépôt: stored gain 150 * 20%
    assert breakdown == {"totalRevenue": 145.0, "buyingRevenue": 115.0, "depotRevenue": 30.0}

    assert _get(client, auth_headers, "total-surcharge") == {"totalSurcharge": 10.0}


def test_command_locations(client, auth_headers, sales):
    locations = _get(client, auth_headers, "command-locations")
    assert [loc["address"] for loc in locations] == ["Tunis", "Sfax", "Tunis"]
    assert locations[0]["client"] == "Amira Ben Salah"
    assert locations[1]["revenue"] == 150


def test_old_range_filters_everything_out(client, auth_headers, sales):
    kpis = _get(client, auth_headers, "kpis", startDate="2000-01-01", endDate="2000-12-31")
    assert kpis["totalCommands"] == 0
    assert kpis["avgOrderValue"] == 0


def test_invalid_period(client, auth_headers):
    res = client.get("/stats/kpis", headers=auth_headers, params={"period": "week"})
    assert res.status_code == 400
