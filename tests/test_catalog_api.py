from decimal import Decimal

API = "/api"


def _create_category(client, name, description=None):
    response = client.post(f"{API}/categories", json={"name": name, "description": description})
    assert response.status_code == 201, response.text
    return response.json()


def _create_product(client, name, category_ids, price="9.99", **extra):
    response = client.post(
        f"{API}/products",
        json={"name": name, "price": price, "category_ids": category_ids, **extra},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_product_lifecycle_scenario(client):
    electronics = _create_category(client, "Electronics")
    assert isinstance(electronics["id"], int)

    product = _create_product(client, "Widget", [electronics["id"]], price=9.99)
    assert product["categories"] == [{"id": electronics["id"], "name": "Electronics"}]
    assert Decimal(str(product["price"])) == Decimal("9.99")

    get_resp = client.get(f"{API}/products/{product['id']}")
    assert get_resp.status_code == 200
    assert get_resp.json()["categories"] == [{"id": electronics["id"], "name": "Electronics"}]

    put_resp = client.put(f"{API}/products/{product['id']}", json={"category_ids": []})
    assert put_resp.status_code == 422
    unchanged = client.get(f"{API}/products/{product['id']}").json()
    assert unchanged["categories"] == [{"id": electronics["id"], "name": "Electronics"}]

    delete_resp = client.delete(f"{API}/categories/{electronics['id']}")
    assert delete_resp.status_code == 204

    after = client.get(f"{API}/products/{product['id']}")
    assert after.status_code == 200
    assert after.json()["categories"] == []


def test_duplicate_category_name_returns_conflict(client):
    _create_category(client, "Books")

    response = client.post(f"{API}/categories", json={"name": "Books"})

    assert response.status_code == 409
    assert response.json()["detail"] == "Category with this name already exists"
    listing = client.get(f"{API}/categories").json()
    assert [c["name"] for c in listing].count("Books") == 1


def test_category_not_found_returns_404(client):
    assert client.get(f"{API}/categories/999999").status_code == 404
    assert client.put(f"{API}/categories/999999", json={"name": "X"}).status_code == 404
    assert client.delete(f"{API}/categories/999999").status_code == 404
    assert client.get(f"{API}/categories/999999/products").status_code == 404


def test_category_list_with_counts(client):
    books = _create_category(client, "Books")
    _create_category(client, "Art")
    _create_product(client, "Novel", [books["id"]])

    plain = client.get(f"{API}/categories").json()
    assert [c["name"] for c in plain] == ["Art", "Books"]
    assert all(c["product_count"] is None for c in plain)

    counted = client.get(f"{API}/categories", params={"include_product_count": "true"}).json()
    assert {c["name"]: c["product_count"] for c in counted} == {"Art": 0, "Books": 1}


def test_category_partial_update(client):
    books = _create_category(client, "Books", "Paper")

    response = client.put(f"{API}/categories/{books['id']}", json={"name": "Literature"})

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Literature"
    assert data["description"] == "Paper"


def test_category_products_endpoint(client):
    books = _create_category(client, "Books")
    toys = _create_category(client, "Toys")
    puzzle = _create_product(client, "Puzzle book", [toys["id"], books["id"]])
    _create_product(client, "Ball", [toys["id"]])

    response = client.get(f"{API}/categories/{books['id']}/products")

    assert response.status_code == 200
    data = response.json()
    assert [p["id"] for p in data] == [puzzle["id"]]
    assert [c["name"] for c in data[0]["categories"]] == ["Books", "Toys"]


def test_create_product_validation_errors(client):
    books = _create_category(client, "Books")

    no_categories = client.post(
        f"{API}/products", json={"name": "Orphan", "price": "1.00", "category_ids": []}
    )
    zero_price = client.post(
        f"{API}/products", json={"name": "Free", "price": "0", "category_ids": [books["id"]]}
    )
    unknown_category = client.post(
        f"{API}/products", json={"name": "Ghost", "price": "1.00", "category_ids": [999999]}
    )

    assert no_categories.status_code == 422
    assert zero_price.status_code == 422
    assert unknown_category.status_code == 422
    assert "999999" in unknown_category.json()["detail"]
    assert client.get(f"{API}/products").json()["total"] == 0


def test_duplicate_sku_returns_conflict(client):
    books = _create_category(client, "Books")
    _create_product(client, "First", [books["id"]], sku="SKU-1")

    response = client.post(
        f"{API}/products",
        json={"name": "Second", "price": "2.00", "sku": "SKU-1", "category_ids": [books["id"]]},
    )

    assert response.status_code == 409


def test_product_update_replaces_categories(client):
    books = _create_category(client, "Books")
    toys = _create_category(client, "Toys")
    product = _create_product(client, "Puzzle", [books["id"]])

    response = client.put(
        f"{API}/products/{product['id']}",
        json={"name": "Puzzle box", "category_ids": [toys["id"]]},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Puzzle box"
    assert data["categories"] == [{"id": toys["id"], "name": "Toys"}]
    assert Decimal(str(data["price"])) == Decimal("9.99")


def test_product_not_found_returns_404(client):
    assert client.get(f"{API}/products/999999").status_code == 404
    assert client.put(f"{API}/products/999999", json={"name": "X"}).status_code == 404
    assert client.delete(f"{API}/products/999999").status_code == 404


def test_oversized_ids_and_pages_are_handled(client):
    huge = 10**20
    books = _create_category(client, "Books")
    _create_product(client, "Novel", [books["id"]])

    assert client.get(f"{API}/products/{huge}").status_code == 404
    assert client.get(f"{API}/categories/{huge}").status_code == 404
    assert client.get(f"{API}/categories/{huge}/products").status_code == 404

    far = client.get(f"{API}/products", params={"page": huge})
    assert far.status_code == 200
    assert far.json()["items"] == []

    unknown = client.get(f"{API}/products", params={"category_id": huge}).json()
    assert (unknown["items"], unknown["total"]) == ([], 0)

    response = client.post(
        f"{API}/products", json={"name": "Ghost", "price": "1.00", "category_ids": [huge]}
    )
    assert response.status_code == 422


def test_delete_product_keeps_categories(client):
    books = _create_category(client, "Books")
    product = _create_product(client, "Novel", [books["id"]])

    assert client.delete(f"{API}/products/{product['id']}").status_code == 204

    assert client.get(f"{API}/products/{product['id']}").status_code == 404
    assert client.get(f"{API}/categories/{books['id']}").status_code == 200
    assert client.get(f"{API}/categories/{books['id']}/products").json() == []


def test_product_listing_pagination_and_filter(client):
    books = _create_category(client, "Books")
    toys = _create_category(client, "Toys")
    book_ids = [_create_product(client, f"Book {i}", [books["id"]])["id"] for i in range(12)]
    _create_product(client, "Ball", [toys["id"]])

    first = client.get(f"{API}/products", params={"page_size": 5}).json()
    assert first["total"] == 13
    assert (first["page"], first["page_size"]) == (1, 5)
    assert len(first["items"]) == 5

    filtered = client.get(
        f"{API}/products", params={"category_id": books["id"], "page": 3, "page_size": 5}
    ).json()
    assert filtered["total"] == 12
    assert [item["id"] for item in filtered["items"]] == book_ids[10:]

    capped = client.get(f"{API}/products", params={"page_size": 1000, "page": 0}).json()
    assert (capped["page"], capped["page_size"]) == (1, 100)


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}
