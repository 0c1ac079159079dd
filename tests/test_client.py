import json
from datetime import date

import requests

from library_client import LibraryClient


def make_response(status_code, payload=None):
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(payload).encode("utf-8") if payload is not None else b""
    response.url = "http://library.test"
    return response


class RecordingSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def request(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.response


def test_issue_book_sends_camel_case_payload():
    session = RecordingSession(make_response(200, {"message": "Book issued successfully"}))
    client = LibraryClient(base_url="http://library.test/", session=session)

    data, error = client.issue_book("123", mobile="555", borrower="Alice", due_date=date(2024, 1, 1))

    assert error is None
    assert data["message"] == "Book issued successfully"
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "http://library.test/api/v1/books/issue/123"
    assert call["json"] == {"mobile": "555", "borrower": "Alice", "dueDate": "2024-01-01"}


def test_return_book_omits_missing_fields():
    session = RecordingSession(make_response(200, {}))
    client = LibraryClient(base_url="http://library.test", session=session)

    client.return_book("123", borrower_name="Alice")

    assert session.calls[0]["json"] == {"borrowerName": "Alice"}


def test_error_body_is_parsed():
    session = RecordingSession(make_response(409, {"detail": "Book is already borrowed", "error": "conflict"}))
    client = LibraryClient(base_url="http://library.test", session=session)

    data, error = client.issue_book("123", mobile="555", borrower="Alice", due_date="2024-01-01")

    assert data is None
    assert error == {"status_code": 409, "kind": "conflict", "message": "Book is already borrowed"}


def test_list_on_error_returns_empty_list():
    session = RecordingSession(make_response(404, {"detail": "No books are available", "error": "not_found"}))
    client = LibraryClient(base_url="http://library.test", session=session)

    books, error = client.list_available_books()

    assert books == []
    assert error["status_code"] == 404


def test_connection_error():
    session = RecordingSession(error=requests.ConnectionError("refused"))
    client = LibraryClient(base_url="http://library.test", session=session)

    data, error = client.get_book("123")

    assert data is None
    assert error["status_code"] is None
    assert "refused" in error["message"]


def test_overdue_loans_passes_reference_date():
    session = RecordingSession(make_response(200, []))
    client = LibraryClient(base_url="http://library.test", session=session)

    loans, error = client.overdue_loans(date(2024, 2, 1))

    assert loans == [] and error is None
    assert session.calls[0]["params"] == {"asOf": "2024-02-01"}


def test_list_books_and_loans():
    session = RecordingSession(make_response(200, [{"ISBN": "123"}]))
    client = LibraryClient(base_url="http://library.test", session=session)

    books, error = client.list_books()
    assert books == [{"ISBN": "123"}] and error is None
    client.list_loans()
    client.list_loans(active=True)

    assert [(c["method"], c["url"], c["params"]) for c in session.calls] == [
        ("GET", "http://library.test/api/v1/books/", None),
        ("GET", "http://library.test/api/v1/loans/", None),
        ("GET", "http://library.test/api/v1/loans/", {"active": "true"}),
    ]


def test_get_transaction_and_member():
    session = RecordingSession(make_response(404, {"detail": "Transaction not found", "error": "not_found"}))
    client = LibraryClient(base_url="http://library.test", session=session)

    data, error = client.get_transaction(7)
    assert data is None
    assert error["kind"] == "not_found"

    client.get_member("123")
    assert session.calls[0]["url"] == "http://library.test/api/v1/transactions/7"
    assert session.calls[1]["url"] == "http://library.test/api/v1/members/123"
