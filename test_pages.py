"""
Тесты серверных страниц витрины.
"""

from app.db.models import Product


def _product(category, **overrides):
    values = dict(
        category_id=category.id,
        name="لنت ترمز جلو",
        slug="لنت-ترمز-جلو",
        description="لنت سرامیکی",
        part_number="BP-206",
        brand="بوش",
        car_type="پژو ۲۰۶",
        is_featured=True,
    )
    values.update(overrides)
    return Product(**values)


def test_home_page(client, db_session, category):
    db_session.add(_product(category))
    db_session.commit()

    response = client.get("/")

    assert response.status_code == 200
    assert 'dir="rtl"' in response.text
    assert category.name in response.text
    assert "لنت ترمز جلو" in response.text


def test_products_page_filters_by_category(client, db_session, category):
    db_session.add_all([
        _product(category),
        _product(category, name="غیرفعال", slug="off", is_active=False),
    ])
    db_session.commit()

    response = client.get("/products", params={"category": category.slug})

    assert response.status_code == 200
    assert "لنت ترمز جلو" in response.text
    assert "غیرفعال" not in response.text


def test_product_page_counts_view(client, db_session, category):
    product = _product(category)
    db_session.add(product)
    db_session.commit()

    response = client.get(f"/products/{product.slug}")

    assert response.status_code == 200
    assert "BP-206" in response.text
    db_session.expire_all()
    assert db_session.get(Product, product.id).views_count == 1


def test_unknown_product_renders_not_found(client):
    response = client.get("/products/ناموجود")

    assert response.status_code == 404
    assert "صفحه مورد نظر یافت نشد" in response.text


def test_about_contact_and_admin_pages(client):
    assert client.get("/about").status_code == 200
    assert client.get("/contact").status_code == 200
    admin = client.get("/admin")
    assert admin.status_code == 200
    assert "admin.js" in admin.text


def test_health(client):
    body = client.get("/api/health").json()
    assert body["success"] is True
    assert "timestamp" in body


def test_products_page_rejects_huge_page_number(client):
    response = client.get("/products", params={"page": "99999999999999999999"})
    assert response.status_code == 400
