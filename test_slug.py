"""
Тесты генерации slug.
"""

import re

from app.db.models import Category
from app.services.slug import (
    CATEGORY_SLUG_PREFIX,
    PRODUCT_SLUG_PREFIX,
    is_valid_slug,
    slugify,
    unique_slug,
)

ALLOWED = re.compile(r"^[؀-ۿa-z0-9-]+$")


def test_persian_name_keeps_letters_and_joins_words():
    assert slugify("لنت ترمز جلو", CATEGORY_SLUG_PREFIX) == "لنت-ترمز-جلو"


def test_mixed_script_is_lowercased():
    assert slugify("Brake Pad پژو 206", PRODUCT_SLUG_PREFIX) == "brake-pad-پژو-206"


def test_invalid_runs_collapse_and_edges_are_trimmed():
    assert slugify("  --فیلتر!!  روغن??  ", PRODUCT_SLUG_PREFIX) == "فیلتر-روغن"


def test_empty_result_falls_back_to_prefix_and_timestamp():
    slug = slugify("!!! ???", PRODUCT_SLUG_PREFIX)
    assert slug.startswith(f"{PRODUCT_SLUG_PREFIX}-")
    assert slug.rsplit("-", 1)[1].isdigit()


def test_generated_slugs_use_only_allowed_characters():
    names = ["کمک فنر (عقب)", "Oil_Filter #12", "تسمه/تایم", "a  b\tc", "۱۲۳ قطعه"]
    for name in names:
        slug = slugify(name, PRODUCT_SLUG_PREFIX)
        assert ALLOWED.match(slug), slug
        assert not slug.startswith("-") and not slug.endswith("-")
        assert "--" not in slug


def test_is_valid_slug():
    assert is_valid_slug("لنت-ترمز")
    assert is_valid_slug("brake-pad-2")
    assert not is_valid_slug("Brake")
    assert not is_valid_slug("-brake")
    assert not is_valid_slug("brake--pad")
    assert not is_valid_slug("brake pad")


def test_unique_slug_appends_counter(db_session):
    db_session.add_all([
        Category(name="لنت", slug="لنت"),
        Category(name="لنت ۲", slug="لنت-1"),
    ])
    db_session.commit()

    assert unique_slug(db_session, Category, "لنت") == "لنت-2"
    assert unique_slug(db_session, Category, "فیلتر") == "فیلتر"


def test_unique_slug_ignores_record_being_updated(db_session):
    category = Category(name="لنت", slug="لنت")
    db_session.add(category)
    db_session.commit()

    assert unique_slug(db_session, Category, "لنت", exclude_id=category.id) == "لنت"
