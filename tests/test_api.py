API = "/api/v1"

ISSUE_BODY = {"mobile": "555", "borrower": "Alice", "dueDate": "2024-01-01"}


def add_book(client, isbn="123", title="Dune", author="Frank Herbert"):
    r = client.post(f"{API}/books/", json={"ISBN": isbn, "title": title, "author": author})
    assert r.status_code == 201
    return r.json()


def test_root_and_health(client):
    assert client.get("/").text == "Library Management System is running!"
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_add_book(client):
    book = add_book(client)
    assert book["ISBN"] == "123"
    assert book["status"] == "available"
    assert book["borrower"] is None

    r = client.post(f"{API}/books/", json={"ISBN": "123", "title": "Dune", "author": "Frank Herbert"})
    assert r.status_code == 409
    assert r.json()["error"] == "conflict"

    r = client.post(f"{API}/books/", json={"ISBN": "456", "title": "Dune"})
    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"


def test_get_book_by_isbn(client):
    add_book(client)

    r = client.get(f"{API}/books/123")
    assert r.status_code == 200
    assert r.json()["title"] == "Dune"

    r = client.get(f"{API}/books/999")
    assert r.status_code == 404
    assert r.json() == {"detail": "No book is available with provided id", "error": "not_found"}


def test_list_available_books(client):
    r = client.get(f"{API}/books/available")
    assert r.status_code == 404

    add_book(client, "123")
    add_book(client, "456", title="Emma", author="Jane Austen")
    client.post(f"{API}/books/issue/456", json=ISSUE_BODY)

    r = client.get(f"{API}/books/available")
    assert r.status_code == 200
    assert [b["ISBN"] for b in r.json()] == ["123"]
    assert len(client.get(f"{API}/books/").json()) == 2


def test_issue_and_return_scenario(client):
    add_book(client)

    r = client.post(f"{API}/books/issue/123", json=ISSUE_BODY)
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Book issued successfully"
    assert body["book"]["status"] == "borrowed"
    assert body["book"]["borrower"] == "Alice"
    assert body["dueDate"] == "2024-01-01"
    assert body["transaction"]["bookId"] == "123"
    assert body["transaction"]["transactionType"] == "issue"
    assert body["loan"]["dueDate"] == "2024-01-01"
    assert body["loan"]["active"] is True

    r = client.post(f"{API}/books/issue/123", json=ISSUE_BODY)
    assert r.status_code == 409
    assert r.json()["detail"] == "Book is already borrowed"

    r = client.post(f"{API}/books/return/123", json={"borrowerName": "Alice"})
    assert r.status_code == 200
    body = r.json()
    assert body["book"]["status"] == "available"
    assert body["book"]["borrower"] is None
    assert body["transaction"]["transactionType"] == "return"

    r = client.post(f"{API}/books/return/123", json={"borrowerName": "Alice"})
    assert r.status_code == 409
    assert r.json()["detail"] == "Book was not borrowed"

    history = client.get(f"{API}/books/123/transactions").json()
    assert [t["transactionType"] for t in history] == ["issue", "return"]


def test_issue_errors(client):
    add_book(client)

    r = client.post(f"{API}/books/issue/999", json=ISSUE_BODY)
    assert r.status_code == 404

    r = client.post(f"{API}/books/issue/123", json={"borrower": "Alice", "dueDate": "2024-01-01"})
    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"

    r = client.post(f"{API}/books/issue/123")
    assert r.status_code == 400

    assert client.get(f"{API}/books/123").json()["status"] == "available"


def test_malformed_issue_body_is_a_validation_error(client):
    add_book(client)

    r = client.post(f"{API}/books/issue/123", json={**ISSUE_BODY, "dueDate": "next week"})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "validation_error"
    assert "dueDate" in body["detail"]

    r = client.post(f"{API}/books/issue/123", json={**ISSUE_BODY, "mobile": 555})
    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"
    assert "mobile" in r.json()["detail"]

    r = client.get(f"{API}/loans/overdue", params={"asOf": "someday"})
    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"

    book = client.get(f"{API}/books/123").json()
    assert book["status"] == "available"
    assert client.get(f"{API}/books/123/transactions").json() == []


def test_return_requires_identity(client):
    add_book(client)
    client.post(f"{API}/books/issue/123", json=ISSUE_BODY)

    r = client.post(f"{API}/books/return/123", json={})
    assert r.status_code == 400
    assert r.json()["detail"] == "Either borrower name or mobile number is required"


def test_delete_book(client):
    add_book(client)
    client.post(f"{API}/books/issue/123", json=ISSUE_BODY)

    r = client.delete(f"{API}/books/delete/123")
    assert r.status_code == 409

    client.post(f"{API}/books/return/123", json={"mobile": "555"})
    r = client.delete(f"{API}/books/delete/123")
    assert r.status_code == 200
    assert r.json() == {"message": "Book deleted successfully", "deletedCount": 1}

    r = client.delete(f"{API}/books/delete/123")
    assert r.status_code == 404


def test_members(client):
    r = client.get(f"{API}/members/")
    assert r.status_code == 404

    r = client.post(f"{API}/members/add", json={"name": "Bob", "mobile": "777"})
    assert r.status_code == 400
    assert r.json()["detail"] == "All fields (name, mobile, email) are required"

    r = client.post(f"{API}/members/add", json={"name": "Bob", "mobile": "777", "email": "bob@example.com"})
    assert r.status_code == 201
    assert r.json()["member"]["email"] == "bob@example.com"

    assert len(client.get(f"{API}/members/").json()) == 1


def test_update_and_delete_member_by_book(client):
    add_book(client)

    r = client.put(f"{API}/members/update/123", json={"name": "Alicia"})
    assert r.status_code == 404

    r = client.get(f"{API}/members/123")
    assert r.status_code == 404
    assert r.json() == {"detail": "Member not found", "error": "not_found"}

    client.post(f"{API}/books/issue/123", json=ISSUE_BODY)

    r = client.get(f"{API}/members/123")
    assert r.status_code == 200
    assert r.json()["name"] == "Alice"
    assert r.json()["bookId"] == "123"

    r = client.put(f"{API}/members/update/123", json={"name": "Alicia"})
    assert r.status_code == 200
    member = r.json()["member"]
    assert member["name"] == "Alicia"
    assert member["mobile"] == "555"
    assert member["bookId"] == "123"

    r = client.delete(f"{API}/members/delete/123")
    assert r.status_code == 200
    assert r.json() == {"message": "Member deleted successfully", "bookId": "123"}

    r = client.delete(f"{API}/members/delete/123")
    assert r.status_code == 404
    assert client.get(f"{API}/members/123").status_code == 404

    # The book comes back but nobody is on record as holding it.
    r = client.post(f"{API}/books/return/123", json={"borrowerName": "Alicia"})
    assert r.status_code == 500
    assert r.json() == {"detail": "Member not found for this book", "error": "inconsistent_state"}
    assert client.get(f"{API}/books/123").json()["status"] == "available"


def test_transactions(client):
    add_book(client)
    client.post(f"{API}/books/issue/123", json=ISSUE_BODY)
    client.post(f"{API}/books/return/123", json={"mobile": "555"})

    r = client.get(f"{API}/transactions/")
    assert r.status_code == 200
    entries = r.json()
    assert [t["transactionType"] for t in entries] == ["return", "issue"]
    assert all(t["memberId"] == "555" for t in entries)

    r = client.get(f"{API}/transactions/", params={"transactionType": "issue"})
    assert len(r.json()) == 1

    r = client.get(f"{API}/transactions/{entries[0]['id']}")
    assert r.status_code == 200
    assert r.json()["transactionType"] == "return"

    r = client.get(f"{API}/transactions/9999")
    assert r.status_code == 404


def test_loans_and_overdue(client):
    add_book(client, "123")
    add_book(client, "456", title="Emma", author="Jane Austen")
    client.post(f"{API}/books/issue/123", json=ISSUE_BODY)
    client.post(f"{API}/books/issue/456", json={"mobile": "777", "borrower": "Bob", "dueDate": "2024-03-01"})

    r = client.get(f"{API}/loans/overdue", params={"asOf": "2024-02-01"})
    assert r.status_code == 200
    assert [loan["bookId"] for loan in r.json()] == ["123"]

    client.post(f"{API}/books/return/123", json={"mobile": "555"})

    r = client.get(f"{API}/loans/overdue", params={"asOf": "2024-02-01"})
    assert r.json() == []
    assert len(client.get(f"{API}/loans/").json()) == 2
    assert [loan["bookId"] for loan in client.get(f"{API}/loans/", params={"active": True}).json()] == ["456"]
