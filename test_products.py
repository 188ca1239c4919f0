"""
Тесты товаров: REST API, изображения, счетчик просмотров.
"""

import pytest
from sqlalchemy.orm import Session

from app.core.errors import BoundsError
from app.db.models import Category, Product
from app.services.product_service import ProductService
from conftest import jpeg_upload, stored_files


def _form(category, /, **overrides):
    data = {
        "name": "لنت ترمز جلو",
        "description": "لنت ترمز سرامیکی",
        "category": str(category.id),
        "brand": "بوش",
        "carType": "پژو ۲۰۶",
        "partNumber": "BP-206",
    }
    data.update(overrides)
    return {key: value for key, value in data.items() if value is not None}


def _create(client, auth_headers, category, /, images=0, **overrides):
    files = [jpeg_upload(f"p{i}.jpg") for i in range(images)]
    return client.post(
        "/api/products/admin",
        data=_form(category, **overrides),
        files=files or None,
        headers=auth_headers,
    )


def _main_count(product):
    return sum(1 for image in product["images"] if image["isMain"])


def test_create_product_with_images(client, auth_headers, category, storage):
    response = _create(client, auth_headers, category, images=3)

    assert response.status_code == 201
    product = response.json()["data"]["product"]
    assert product["slug"] == "لنت-ترمز-جلو"
    assert product["category"] == {"id": category.id, "name": category.name, "slug": category.slug}
    assert [image["isMain"] for image in product["images"]] == [True, False, False]
    assert all(image["alt"] == product["name"] for image in product["images"])
    assert len(stored_files(storage)) == 3


def test_create_product_without_images(client, auth_headers, category):
    response = _create(client, auth_headers, category, isFeatured="true", sortOrder="abc")

    assert response.status_code == 201
    product = response.json()["data"]["product"]
    assert product["images"] == []
    assert product["isFeatured"] is True
    assert product["sortOrder"] == 0
    assert product["viewsCount"] == 0


def test_missing_brand_mentions_field(client, auth_headers, category, storage):
    response = _create(client, auth_headers, category, images=1, brand=None)

    assert response.status_code == 400
    body = response.json()
    assert any(error["field"] == "brand" and "برند" in error["message"] for error in body["errors"])
    assert stored_files(storage) == []


def test_unknown_category_is_rejected(client, auth_headers, category, storage):
    response = _create(client, auth_headers, category, images=1, category="9999")

    assert response.status_code == 400
    assert response.json()["message"] == "دسته‌بندی یافت نشد"
    assert stored_files(storage) == []


def test_description_length_limit(client, auth_headers, category):
    response = _create(client, auth_headers, category, description="x" * 15001)

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "description"


def test_eleven_images_rejected_without_files(client, auth_headers, category, storage, db_session):
    response = _create(client, auth_headers, category, images=11)

    assert response.status_code == 400
    assert "حداکثر 10 فایل" in response.json()["message"]
    assert stored_files(storage) == []
    assert db_session.query(Product).count() == 0


def test_non_image_upload_rejected(client, auth_headers, category, storage):
    response = client.post(
        "/api/products/admin",
        data=_form(category),
        files=[("images[]", ("doc.pdf", b"%PDF-1.4", "application/pdf"))],
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert stored_files(storage) == []


def test_duplicate_names_get_distinct_slugs(client, auth_headers, category):
    first = _create(client, auth_headers, category).json()["data"]["product"]
    second = _create(client, auth_headers, category).json()["data"]["product"]

    assert first["slug"] == "لنت-ترمز-جلو"
    assert second["slug"] == "لنت-ترمز-جلو-1"


def test_explicit_duplicate_slug_is_conflict(client, auth_headers, category):
    _create(client, auth_headers, category, slug="bp-206")
    response = _create(client, auth_headers, category, slug="bp-206")

    assert response.status_code == 409
    assert response.json()["message"] == "slug وارد شده قبلاً استفاده شده است"


def test_update_appends_images_and_keeps_main(client, auth_headers, category):
    product = _create(client, auth_headers, category, images=2).json()["data"]["product"]

    response = client.put(
        f"/api/products/admin/{product['id']}",
        data={"brand": "والئو", "isActive": "false"},
        files=[jpeg_upload("new.jpg")],
        headers=auth_headers,
    )

    assert response.status_code == 200
    updated = response.json()["data"]["product"]
    assert updated["brand"] == "والئو"
    assert updated["isActive"] is False
    assert len(updated["images"]) == 3
    assert updated["images"][0]["url"] == product["images"][0]["url"]
    assert _main_count(updated) == 1


def test_update_first_image_becomes_main_when_none(client, auth_headers, category):
    product = _create(client, auth_headers, category).json()["data"]["product"]

    updated = client.put(
        f"/api/products/admin/{product['id']}",
        files=[jpeg_upload("a.jpg"), jpeg_upload("b.jpg")],
        headers=auth_headers,
    ).json()["data"]["product"]

    assert [image["isMain"] for image in updated["images"]] == [True, False]


def test_update_replace_images_removes_old_files(client, auth_headers, category, storage):
    product = _create(client, auth_headers, category, images=2).json()["data"]["product"]

    updated = client.put(
        f"/api/products/admin/{product['id']}",
        data={"replaceImages": "true"},
        files=[jpeg_upload("c.jpg")],
        headers=auth_headers,
    ).json()["data"]["product"]

    assert len(updated["images"]) == 1
    assert updated["images"][0]["isMain"] is True
    assert stored_files(storage) == [updated["images"][0]["url"].rsplit("/", 1)[1]]


def test_update_cannot_clear_required_field(client, auth_headers, category):
    product = _create(client, auth_headers, category).json()["data"]["product"]

    response = client.put(
        f"/api/products/admin/{product['id']}",
        json={"carType": ""},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["message"] == "نوع خودرو الزامی است"


def test_update_boolean_must_be_true_or_false(client, auth_headers, category):
    product = _create(client, auth_headers, category).json()["data"]["product"]

    response = client.put(
        f"/api/products/admin/{product['id']}",
        data={"isFeatured": "maybe"},
        headers=auth_headers,
    )
    assert response.status_code == 400


def test_delete_product_removes_files(client, auth_headers, category, storage, db_session):
    product = _create(client, auth_headers, category, images=3).json()["data"]["product"]
    assert len(stored_files(storage)) == 3

    response = client.delete(f"/api/products/admin/{product['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert stored_files(storage) == []
    assert db_session.get(Product, product["id"]) is None


def test_delete_image_twice_is_bounds_error(client, auth_headers, category, storage):
    product = _create(client, auth_headers, category, images=1).json()["data"]["product"]
    path = f"/api/products/admin/{product['id']}/image/0"

    first = client.delete(path, headers=auth_headers)
    second = client.delete(path, headers=auth_headers)

    assert first.status_code == 200
    assert first.json()["data"]["product"]["images"] == []
    assert second.status_code == 400
    assert second.json()["message"] == "تصویر یافت نشد"
    assert stored_files(storage) == []


def test_delete_main_image_promotes_next(client, auth_headers, category):
    product = _create(client, auth_headers, category, images=3).json()["data"]["product"]

    updated = client.delete(
        f"/api/products/admin/{product['id']}/image/0", headers=auth_headers
    ).json()["data"]["product"]

    assert [image["url"] for image in updated["images"]] == [
        image["url"] for image in product["images"][1:]
    ]
    assert updated["images"][0]["isMain"] is True
    assert _main_count(updated) == 1


def test_set_main_image(client, auth_headers, category):
    product = _create(client, auth_headers, category, images=3).json()["data"]["product"]

    updated = client.put(
        f"/api/products/admin/{product['id']}/image/2/main", headers=auth_headers
    ).json()["data"]["product"]

    assert [image["isMain"] for image in updated["images"]] == [False, False, True]


def test_service_bounds_error_for_negative_index(db_session, product_images, category):
    product = Product(
        category_id=category.id, name="x", slug="x", description="d",
        part_number="1", brand="b", car_type="c",
    )
    db_session.add(product)
    db_session.commit()

    with pytest.raises(BoundsError):
        ProductService(db_session, product_images).delete_image(product.id, -1)


def test_public_detail_increments_views_by_one(client, auth_headers, category, db_session):
    product = _create(client, auth_headers, category).json()["data"]["product"]

    first = client.get(f"/api/products/{product['slug']}").json()["data"]["product"]
    second = client.get(f"/api/products/{product['slug']}").json()["data"]["product"]

    assert first["viewsCount"] == 1
    assert second["viewsCount"] == 2
    db_session.expire_all()
    assert db_session.get(Product, product["id"]).views_count == 2


def test_public_detail_hides_inactive(client, auth_headers, category):
    product = _create(client, auth_headers, category, isActive="false").json()["data"]["product"]

    response = client.get(f"/api/products/{product['slug']}")
    assert response.status_code == 404
    assert response.json()["message"] == "محصول یافت نشد"


def test_public_list_filters_and_paginates(client, auth_headers, db_session, category):
    other = Category(name="فیلتر", slug="فیلتر")
    db_session.add(other)
    db_session.commit()
    _create(client, auth_headers, category, name="لنت A", partNumber="AAA-1")
    _create(client, auth_headers, category, name="لنت B", brand="Valeo")
    _create(client, auth_headers, category, name="لنت C", isActive="false")
    _create(client, auth_headers, other, name="فیلتر روغن", isFeatured="true")

    everything = client.get("/api/products").json()["data"]
    assert everything["pagination"]["total"] == 3

    by_slug = client.get("/api/products", params={"category": category.slug}).json()["data"]
    assert {p["name"] for p in by_slug["products"]} == {"لنت A", "لنت B"}

    by_id = client.get("/api/products", params={"category": other.id}).json()["data"]
    assert [p["name"] for p in by_id["products"]] == ["فیلتر روغن"]

    by_brand = client.get("/api/products", params={"search": "valeo"}).json()["data"]
    assert [p["name"] for p in by_brand["products"]] == ["لنت B"]

    by_part = client.get("/api/products", params={"search": "aaa"}).json()["data"]
    assert [p["name"] for p in by_part["products"]] == ["لنت A"]

    featured = client.get("/api/products", params={"featured": "true"}).json()["data"]
    assert [p["name"] for p in featured["products"]] == ["فیلتر روغن"]

    page = client.get("/api/products", params={"limit": 2, "page": 2, "sort": "name"}).json()["data"]
    assert len(page["products"]) == 1
    assert page["pagination"]["hasNext"] is False
    assert page["pagination"]["hasPrev"] is True

    unknown = client.get("/api/products", params={"category": "ناموجود"}).json()["data"]
    assert unknown["products"] == []


def test_admin_list_includes_inactive(client, auth_headers, category):
    _create(client, auth_headers, category, name="فعال")
    _create(client, auth_headers, category, name="غیرفعال", isActive="false", carType="سمند")

    all_items = client.get("/api/products/admin", headers=auth_headers).json()["data"]
    assert all_items["pagination"]["total"] == 2

    inactive = client.get(
        "/api/products/admin", params={"status": "inactive"}, headers=auth_headers
    ).json()["data"]
    assert [p["name"] for p in inactive["products"]] == ["غیرفعال"]

    by_car = client.get(
        "/api/products/admin", params={"search": "سمند"}, headers=auth_headers
    ).json()["data"]
    assert [p["name"] for p in by_car["products"]] == ["غیرفعال"]


def test_admin_get_by_id(client, auth_headers, category):
    product = _create(client, auth_headers, category).json()["data"]["product"]

    response = client.get(f"/api/products/admin/{product['id']}", headers=auth_headers)
    assert response.json()["data"]["product"]["slug"] == product["slug"]
    assert client.get("/api/products/admin/999", headers=auth_headers).status_code == 404


def test_featured_and_related(client, auth_headers, db_session, category):
    other = Category(name="فیلتر", slug="فیلتر")
    db_session.add(other)
    db_session.commit()
    main = _create(client, auth_headers, category, name="لنت اصلی", isFeatured="true").json()["data"]["product"]
    _create(client, auth_headers, category, name="لنت دوم")
    _create(client, auth_headers, category, name="لنت غیرفعال", isActive="false")
    _create(client, auth_headers, other, name="فیلتر هوا")

    featured = client.get("/api/products/featured/list").json()["data"]["products"]
    assert [p["name"] for p in featured] == ["لنت اصلی"]

    related = client.get(f"/api/products/{main['slug']}/related").json()["data"]["products"]
    assert [p["name"] for p in related] == ["لنت دوم"]

    # Похожие товары не увеличивают счетчик просмотров
    db_session.expire_all()
    assert db_session.get(Product, main["id"]).views_count == 0


def test_orphaned_files_removed_on_commit_failure(
    client, auth_headers, category, storage, monkeypatch
):
    calls = []

    def failing_commit(self):
        calls.append(self)
        raise RuntimeError("database is gone")

    monkeypatch.setattr(Session, "commit", failing_commit)
    with pytest.raises(RuntimeError):
        client.post(
            "/api/products/admin",
            data=_form(category),
            files=[jpeg_upload("a.jpg"), jpeg_upload("b.jpg")],
            headers=auth_headers,
        )

    assert len(calls) == 1
    assert stored_files(storage) == []


def test_category_filter_prefers_numeric_slug(client, auth_headers, db_session):
    other = Category(name="سایر", slug="other")
    model = Category(name="206", slug="206")
    db_session.add_all([other, model])
    db_session.commit()
    assert model.id != 206
    _create(client, auth_headers, model, name="چراغ جلو 206")

    by_slug = client.get("/api/products", params={"category": "206"}).json()["data"]
    assert by_slug["pagination"]["total"] == 1
    assert by_slug["products"][0]["name"] == "چراغ جلو 206"

    by_id = client.get("/api/products", params={"category": str(model.id)}).json()["data"]
    assert by_id["pagination"]["total"] == 1

    too_big = client.get(
        "/api/products", params={"category": "99999999999999999999"}
    ).json()["data"]
    assert too_big["products"] == []


@pytest.mark.parametrize("page", ["100001", "99999999999999999999"])
def test_page_out_of_range_is_validation_error(client, auth_headers, page):
    public = client.get("/api/products", params={"page": page})
    assert public.status_code == 400
    assert public.json()["errors"][0]["field"] == "page"

    admin = client.get("/api/products/admin", params={"page": page}, headers=auth_headers)
    assert admin.status_code == 400


def test_out_of_range_integers_are_validation_errors(client, auth_headers, category, storage):
    huge = "99999999999999999999999"

    response = _create(client, auth_headers, category, images=1, sortOrder=huge)
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "sortOrder"

    response = client.post(
        "/api/products/admin",
        data={**_form(category), "category": huge},
        files=[jpeg_upload()],
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "category"
    assert stored_files(storage) == []

    response = client.get(f"/api/products/admin/{huge}", headers=auth_headers)
    assert response.status_code == 400

    product = _create(client, auth_headers, category).json()["data"]["product"]
    response = client.put(
        f"/api/products/admin/{product['id']}",
        data={"sortOrder": huge},
        headers=auth_headers,
    )
    assert response.status_code == 400
