import csv
import io


def _csv_rows(res):
    text = res.content.decode("utf-8")
    assert text.startswith("\ufeff")
    return list(csv.reader(io.StringIO(text[1:])))


def test_products_csv(client, auth_headers, make_product):
    make_product(name="Poussette Yoyo", surcharge=5)

    res = client.get("/products/export/csv", headers=auth_headers)

    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert "products.csv" in res.headers["content-disposition"]
    header, row = _csv_rows(res)
    assert header[:3] == ["ID", "Nom Produit", "Description"]
    assert "Quantité Stock" in header
    assert row[header.index("Nom Produit")] == "Poussette Yoyo"
    assert row[header.index("Statut")] == "Disponible"
    assert row[header.index("En Dépôt")] == "Non"
    assert row[header.index("Catégorie")] == "Poussettes"


def test_empty_export_still_has_headers(client, auth_headers):
    rows = _csv_rows(client.get("/clients/export/csv", headers=auth_headers))
    assert rows == [["ID", "Prénom", "Nom", "Email", "Téléphone", "Adresse", "Date Création"]]


def test_co_clients_csv_contains_rib(client, auth_headers, make_co_client):
    make_co_client()
    header, row = _csv_rows(client.get("/co-clients/export/csv", headers=auth_headers))
    assert row[header.index("RIB")] == "TN59 1000 6035 1835 9847 8831"


def test_commands_csv_uses_french_status(client, auth_headers, make_product, make_client):
    buyer = make_client()
    client.post("/commands", headers=auth_headers, json={
        "productIds": [make_product()["id"]], "clientId": buyer["id"], "deliveryAddress": "Tunis",
        "status": "GOT_PROFIT",
    })

    header, row = _csv_rows(client.get("/commands/export/csv", headers=auth_headers))

    assert row[header.index("Statut")] == "Profit"
    assert row[header.index("Client")] == "Amira Ben Salah"


def test_pdf_export(client, auth_headers, make_product):
    make_product()

    res = client.get("/products/export/pdf", headers=auth_headers)

    assert res.status_code == 200
    assert res.headers["content-type"] == "application/pdf"
    assert res.content.startswith(b"%PDF")


def test_pdf_paginates_long_reports(client, auth_headers, make_client):
    for i in range(40):
        make_client(email=f"client{i}@example.com")

    res = client.get("/clients/export/pdf", headers=auth_headers)

    assert res.status_code == 200
    assert b"/Count 2" in res.content


def test_export_failure_is_a_json_500(client, auth_headers, monkeypatch):
    import routes.products as products_routes

    def broken(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(products_routes, "render_table_pdf", broken)

    res = client.get("/products/export/pdf", headers=auth_headers)

    assert res.status_code == 500
    assert res.json() == {"message": "Error exporting PDF", "error": "disk full"}
