import pytest

from utils.pagination import MAX_PAGE_SIZE, clamp_limit, total_pages


@pytest.mark.parametrize("requested, expected", [(None, 10), (0, 10), (3, 3), (10, 10), (11, 10), (500, 10)])
def test_clamp_limit(requested, expected):
    assert clamp_limit(requested) == expected


def test_total_pages_rounds_up():
    assert total_pages(0, 10) == 0
    assert total_pages(10, 10) == 1
    assert total_pages(11, 10) == 2
    assert total_pages(5, 0) == 0


def test_list_endpoint_caps_limit(client, make_category):
    for i in range(12):
        make_category(name=f"Catégorie {i}")

    res = client.get("/categories", params={"limit": 50})
    body = res.json()

    assert res.status_code == 200
    assert body["limit"] == MAX_PAGE_SIZE
    assert len(body["data"]) == MAX_PAGE_SIZE
    assert body["total"] == 12
    assert body["totalPages"] == 2
    assert body["page"] == 1


def test_second_page_holds_the_rest(client, make_category):
    for i in range(12):
        make_category(name=f"Catégorie {i}")

    body = client.get("/categories", params={"page": 2, "limit": 10}).json()
    assert len(body["data"]) == 2
    assert body["page"] == 2
    # newest first, ties broken by id
    assert body["data"][-1]["name"] == "Catégorie 0"


def test_page_below_one_is_a_validation_error(client):
    res = client.get("/categories", params={"page": 0})
    assert res.status_code == 400
    assert res.json()["message"] == "Validation error"
