def test_category_crud(client, make_user, auth_headers):
    admin = make_user(role="admin")

    res = client.post("/category/categories", json={"name": "Keys", "description": "Keys and keychains"},
                      headers=auth_headers(admin))
    assert res.status_code == 201
    category_id = res.json()["category"]["id"]

    res = client.post("/category/categories", json={"name": "Keys"}, headers=auth_headers(admin))
    assert res.status_code == 409

    client.post("/category/categories", json={"name": "Bags"}, headers=auth_headers(admin))
    names = [category["name"] for category in client.get("/category/categories").json()["categories"]]
    assert names == ["Bags", "Keys"]

    res = client.patch(f"/category/categories/{category_id}", json={"description": "Any keys"},
                       headers=auth_headers(admin))
    assert res.status_code == 200
    category = client.get(f"/category/categories/{category_id}").json()["category"]
    assert category == {"id": category_id, "name": "Keys", "description": "Any keys"}

    assert client.delete(f"/category/categories/{category_id}", headers=auth_headers(admin)).status_code == 200
    assert client.get(f"/category/categories/{category_id}").status_code == 404


def test_category_in_use_cannot_be_deleted(client, make_user, make_lost_item, category, auth_headers):
    admin = make_user(role="admin")
    make_lost_item(make_user())

    res = client.delete(f"/category/categories/{category.id}", headers=auth_headers(admin))
    assert res.status_code == 409


def test_only_admins_manage_categories(client, make_user, category, auth_headers):
    user = make_user()

    assert client.post("/category/categories", json={"name": "Keys"}).status_code == 401

    res = client.post("/category/categories", json={"name": "Keys"}, headers=auth_headers(user))
    assert res.status_code == 403
    assert res.json() == {"message": "Admin access required"}

    res = client.patch(f"/category/categories/{category.id}", json={"name": "Gadgets"}, headers=auth_headers(user))
    assert res.status_code == 403

    assert client.delete(f"/category/categories/{category.id}", headers=auth_headers(user)).status_code == 403
    assert client.get(f"/category/categories/{category.id}").json()["category"]["name"] == "Electronics"
