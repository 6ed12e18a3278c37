import pytest


def test_create_owned_product_computes_gain(client, auth_headers, make_category):
    category = make_category()

    res = client.post("/products", headers=auth_headers, json={
        "name": "Poussette Yoyo",
        "salePrice": 100,
        "purchasePrice": 60,
        "surcharge": 5,
        "categoryId": category["id"],
    })

    assert res.status_code == 201
    body = res.json()
    assert body["gain"] == 35.0
    assert body["isAvailable"] is True
    assert body["isSold"] is False
    assert body["category"]["name"] == "Poussettes"
    assert body["photos"] == []


def test_create_depot_product_ignores_purchase_price(make_product, make_co_client):
    co_client = make_co_client()

    product = make_product(isDepot=True, depotPercentage=20, purchasePrice=80, coClientId=co_client["id"])

    assert product["gain"] == pytest.approx(20.0)
    assert product["coClient"]["firstName"] == "Sonia"


def test_surcharge_defaults_to_zero(make_product):
    product = make_product(surcharge=None)
    assert product["surcharge"] == 0
    assert product["gain"] == 40.0


def test_patch_recomputes_gain_from_merged_values(client, auth_headers, make_product):
    product = make_product()

    res = client.patch(f"/products/{product['id']}", headers=auth_headers, json={"salePrice": 150})

    assert res.status_code == 200
    assert res.json()["gain"] == 90.0
    assert res.json()["purchasePrice"] == 60.0


def test_patch_switch_to_depot(client, auth_headers, make_product):
    product = make_product()

    body = client.patch(
        f"/products/{product['id']}", headers=auth_headers, json={"isDepot": True, "depotPercentage": 30},
    ).json()

    assert body["isDepot"] is True
    assert body["gain"] == pytest.approx(30.0)


def test_patch_name_only_keeps_gain(client, auth_headers, make_product):
    product = make_product(surcharge=10)

    body = client.patch(f"/products/{product['id']}", headers=auth_headers, json={"name": "Yoyo 2"}).json()

    assert body["name"] == "Yoyo 2"
    assert body["gain"] == pytest.approx(30.0)


def test_negative_price_rejected(client, auth_headers, make_category):
    res = client.post("/products", headers=auth_headers, json={
        "name": "X", "salePrice": -1, "categoryId": make_category()["id"],
    })
    assert res.status_code == 400
    assert any(d["field"] == "salePrice" for d in res.json()["details"])


def test_depot_percentage_above_100_rejected(client, auth_headers, make_category):
    res = client.post("/products", headers=auth_headers, json={
        "name": "X", "salePrice": 10, "isDepot": True, "depotPercentage": 120, "categoryId": make_category()["id"],
    })
    assert res.status_code == 400


def test_unknown_category_is_404(client, auth_headers):
    res = client.post("/products", headers=auth_headers, json={"name": "X", "salePrice": 10, "categoryId": 77})
    assert res.status_code == 404
    assert res.json() == {"message": "Category with ID 77 not found"}


def test_get_missing_product(client, auth_headers):
    res = client.get("/products/999", headers=auth_headers)
    assert res.status_code == 404
    assert res.json()["message"] == "Product with ID 999 not found"


def test_list_filters(client, auth_headers, make_category, make_product):
    strollers = make_category(name="Poussettes")["id"]
    clothes = make_category(name="Vêtements")["id"]
    make_product(category_id=strollers, name="Poussette Yoyo", salePrice=300)
    make_product(category_id=strollers, name="Poussette Cybex", salePrice=150, isDepot=True, depotPercentage=25)
    make_product(category_id=clothes, name="Body coton", description="Taille 6 mois", salePrice=12, purchasePrice=4)

    def total(**params):
        return client.get("/products", headers=auth_headers, params=params).json()["total"]

    assert total() == 3
    assert total(categoryId=strollers) == 2
    assert total(isDepot="true") == 1
    assert total(isDepot="false") == 2
    assert total(minPrice=100) == 2
    assert total(minPrice=100, maxPrice=200) == 1
    assert total(search="coton") == 1
    assert total(search="6 mois") == 1
    assert total(search="poussette", isDepot="false") == 1


def test_delete_product_removes_photos(client, auth_headers, make_product):
    product = make_product()
    client.post("/product-photos", headers=auth_headers, json={
        "productId": product["id"], "photoDocs": ["data:image/png;base64,AAAA"],
    })

    res = client.delete(f"/products/{product['id']}", headers=auth_headers)

    assert res.status_code == 200
    assert res.json() == {"message": "Product deleted successfully"}
    assert client.get(f"/products/{product['id']}", headers=auth_headers).status_code == 404


def test_product_in_a_command_cannot_be_deleted(client, auth_headers, make_product, make_client):
    product = make_product()
    buyer = make_client()
    client.post("/commands", headers=auth_headers, json={
        "productIds": [product["id"]], "clientId": buyer["id"], "deliveryAddress": "Tunis",
    })

    res = client.delete(f"/products/{product['id']}", headers=auth_headers)

    assert res.status_code == 409


def test_depot_gain_keeps_sub_cent_precision(make_product):
    product = make_product(salePrice=9.99, isDepot=True, depotPercentage=33)
    assert product["gain"] == pytest.approx(9.99 * (33 / 100))
    assert product["gain"] != 3.3
