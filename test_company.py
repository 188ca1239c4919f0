"""
Тесты информации о компании.
"""


def test_defaults_created_on_first_read(client):
    response = client.get("/api/company-info")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "نام شرکت شما"
    assert data["contact"]["phones"] == []
    assert data["texts"]["productsTitle"] == "محصولات ما"


def test_update_requires_admin(client):
    assert client.put("/api/company-info", json={"name": "x"}).status_code == 401


def test_update_merges_sections(client, auth_headers):
    client.put(
        "/api/company-info",
        json={
            "name": "قطعات یدکی پارس",
            "contact": {"phones": [{"title": "فروش", "number": "09170000000"}]},
            "socialMedia": {"telegram": "https://t.me/pars"},
        },
        headers=auth_headers,
    )
    response = client.put(
        "/api/company-info",
        json={
            "contact": {"address": {"full": "شیراز"}},
            "socialMedia": {"instagram": "https://instagram.com/pars"},
        },
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "قطعات یدکی پارس"
    assert data["contact"]["phones"][0]["number"] == "09170000000"
    assert data["contact"]["address"]["full"] == "شیراز"
    assert data["socialMedia"] == {
        "telegram": "https://t.me/pars",
        "instagram": "https://instagram.com/pars",
    }


def test_update_validates_fields(client, auth_headers):
    response = client.put(
        "/api/company-info", json={"description": "x" * 1001}, headers=auth_headers
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "description"
