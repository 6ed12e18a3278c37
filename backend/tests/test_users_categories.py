def test_create_user_hashes_password_and_lowercases_email(client):
    res = client.post("/users", json={"email": "New@Example.com", "password": "secret1", "username": "nour"})

    assert res.status_code == 201
    body = res.json()
    assert body["email"] == "new@example.com"
    assert "password" not in body and "passwordHash" not in body

    login = client.post("/auth/login", json={"email": "new@example.com", "password": "secret1"})
    assert login.status_code == 200


def test_duplicate_email_conflicts(client, user):
    res = client.post("/users", json={"email": "admin@bebe-depot.com", "password": "secret1"})
    assert res.status_code == 409


def test_short_password_is_a_validation_error(client):
    res = client.post("/users", json={"email": "x@example.com", "password": "123"})
    assert res.status_code == 400
    fields = [d["field"] for d in res.json()["details"]]
    assert "password" in fields


def test_search_users(client, user):
    client.post("/users", json={"email": "nour@example.com", "password": "secret1", "username": "nour"})

    body = client.get("/users", params={"search": "nour"}).json()

    assert body["total"] == 1
    assert body["data"][0]["username"] == "nour"


def test_user_update_and_delete(client):
    created = client.post("/users", json={"email": "a@example.com", "password": "secret1"}).json()

    patched = client.patch(f"/users/{created['id']}", json={"username": "alias"})
    assert patched.json()["username"] == "alias"

    res = client.delete(f"/users/{created['id']}")
    assert res.status_code == 200
    assert res.json() == {"message": "User deleted successfully"}
    assert client.get(f"/users/{created['id']}").status_code == 404


def test_category_crud(client, make_category):
    category = make_category(name="Jouets", description="Jouets d'éveil")

    fetched = client.get(f"/categories/{category['id']}").json()
    assert fetched["description"] == "Jouets d'éveil"

    patched = client.patch(f"/categories/{category['id']}", json={"name": "Jeux"}).json()
    assert patched["name"] == "Jeux"
    assert patched["description"] == "Jouets d'éveil"

    assert client.delete(f"/categories/{category['id']}").json() == {"message": "Category deleted successfully"}
    res = client.get(f"/categories/{category['id']}")
    assert res.status_code == 404
    assert res.json() == {"message": f"Category with ID {category['id']} not found"}


def test_category_search(client, make_category):
    make_category(name="Poussettes")
    make_category(name="Vêtements", description="Bodies et pyjamas")

    assert client.get("/categories", params={"search": "pyjama"}).json()["total"] == 1
    assert client.get("/categories", params={"search": "pouss"}).json()["total"] == 1


def test_empty_category_name_rejected(client):
    res = client.post("/categories", json={"name": ""})
    assert res.status_code == 400


def test_category_with_products_cannot_be_deleted(client, make_product):
    product = make_product()

    res = client.delete(f"/categories/{product['categoryId']}")

    assert res.status_code == 409
    assert client.get(f"/categories/{product['categoryId']}").status_code == 200


def test_delete_missing_category_is_404(client):
    res = client.delete("/categories/4242")

    assert res.status_code == 404
    assert res.json() == {"message": "Category with ID 4242 not found"}
