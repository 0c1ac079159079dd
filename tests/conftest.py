import asyncio

import pytest
from fastapi.testclient import TestClient

from library_circulation_api.app.core.db import Database
from library_circulation_api.app.main import create_app
from library_circulation_api.app.schemas.book import BookCreate
from library_circulation_api.app.services.book_service import BookService


@pytest.fixture
def db(tmp_path):
    # Each test gets its own database file
    database = Database(str(tmp_path / "library.db"))
    database.init()
    return database


@pytest.fixture
def book(db):
    return asyncio.run(
        BookService(db).add_book(BookCreate(isbn="123", title="Dune", author="Frank Herbert"))
    )


@pytest.fixture
def client(db):
    with TestClient(create_app(db)) as test_client:
        yield test_client
