"""
Общие фикстуры тестов.

Переменные окружения задаются до импорта приложения: настройки
читаются один раз при импорте app.core.config.
"""

import os
import tempfile
from io import BytesIO

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("STORAGE_PATH", tempfile.mkdtemp(prefix="autoparts-uploads-"))

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_storage
from app.core.auth import AuthService
from app.db.database import get_db
from app.db.models import Base, Category, User
from app.main import app
from app.services.image_service import (
    CATEGORIES_FOLDER,
    PRODUCTS_FOLDER,
    ImageService,
    IncomingFile,
)
from app.services.storage_service import LocalStorageProvider

ADMIN_EMAIL = "admin@autoparts.ir"
ADMIN_PASSWORD = "secret123"


def create_test_image(fmt: str = "JPEG", size=(32, 32), color="red") -> bytes:
    """Создать изображение в памяти."""
    img = Image.new("RGB", size, color=color)
    buffer = BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def jpeg_upload(name: str = "part.jpg", field: str = "images[]"):
    return (field, (name, create_test_image(), "image/jpeg"))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def storage(tmp_path):
    return LocalStorageProvider(str(tmp_path / "uploads"))


@pytest.fixture
def product_images(storage):
    return ImageService(storage, PRODUCTS_FOLDER, max_files=10, name_prefix="product")


@pytest.fixture
def category_images(storage):
    return ImageService(storage, CATEGORIES_FOLDER, max_files=1, name_prefix="category")


@pytest.fixture
def client(session_factory, storage):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_user(db_session):
    user = User(
        name="مدیر",
        email=ADMIN_EMAIL,
        hashed_password=AuthService.get_password_hash(ADMIN_PASSWORD),
        role="admin",
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(admin_user):
    return {"Authorization": f"Bearer {AuthService.create_access_token(admin_user.id)}"}


@pytest.fixture
def category(db_session):
    category = Category(name="لنت ترمز", slug="لنت-ترمز")
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def jpeg_file():
    return IncomingFile(filename="part.jpg", content_type="image/jpeg", data=create_test_image())


def stored_files(storage, folder: str = PRODUCTS_FOLDER):
    """Список файлов в каталоге хранилища."""
    directory = storage.base_path / folder
    if not directory.exists():
        return []
    return sorted(p.name for p in directory.iterdir())
