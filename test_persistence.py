"""
Тесты сопоставления ошибок уникальности с полями.
"""

from sqlalchemy.exc import IntegrityError

from app.services.persistence import CATEGORY_CONFLICT_MESSAGES, conflict_from_integrity


class _Diag:
    def __init__(self, constraint_name):
        self.constraint_name = constraint_name


class _DriverError(Exception):
    def __init__(self, message, constraint_name=None):
        super().__init__(message)
        self.diag = _Diag(constraint_name)


def _integrity(orig):
    return IntegrityError("INSERT INTO categories ...", {}, orig)


def test_postgres_name_conflict_ignores_value_in_detail():
    orig = _DriverError(
        'duplicate key value violates unique constraint "ix_categories_name"\n'
        "DETAIL:  Key (name)=(slug بلبرینگ) already exists.",
        constraint_name="ix_categories_name",
    )

    error = conflict_from_integrity(_integrity(orig), CATEGORY_CONFLICT_MESSAGES)

    assert error.message == CATEGORY_CONFLICT_MESSAGES["name"]


def test_postgres_message_without_diag():
    orig = Exception(
        'duplicate key value violates unique constraint "ix_categories_slug"\n'
        "DETAIL:  Key (slug)=(name-1) already exists."
    )

    error = conflict_from_integrity(_integrity(orig), CATEGORY_CONFLICT_MESSAGES)

    assert error.message == CATEGORY_CONFLICT_MESSAGES["slug"]


def test_sqlite_unique_message():
    orig = Exception("UNIQUE constraint failed: categories.name")

    error = conflict_from_integrity(_integrity(orig), CATEGORY_CONFLICT_MESSAGES)

    assert error.message == CATEGORY_CONFLICT_MESSAGES["name"]


def test_unknown_constraint_gets_generic_conflict():
    orig = Exception("FOREIGN KEY constraint failed")

    error = conflict_from_integrity(_integrity(orig), CATEGORY_CONFLICT_MESSAGES)

    assert error.status_code == 409
    assert error.message == "اطلاعات تکراری است"
