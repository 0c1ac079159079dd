"""Library circulation API client.

This module defines a small client wrapper around the REST API served
by ``library_circulation_api``.  It uses the ``requests`` library
internally and exposes one method per operation:

* :meth:`add_book`, :meth:`get_book`, :meth:`list_books`,
  :meth:`list_available_books`, :meth:`delete_book` – inventory.
* :meth:`issue_book`, :meth:`return_book` – circulation.
* :meth:`list_members`, :meth:`add_member`, :meth:`get_member`,
  :meth:`update_member`, :meth:`delete_member` – members.
* :meth:`list_transactions`, :meth:`get_transaction`,
  :meth:`book_history`, :meth:`list_loans`, :meth:`overdue_loans` –
  ledger and loans.

Every method returns a tuple ``(data, error)``.  On success ``error``
is ``None``; on failure ``data`` is ``None`` (or an empty list) and
``error`` is a dictionary with ``status_code``, ``kind`` and
``message``.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Error = Dict[str, Any]


class LibraryClient:
    """Client for interacting with the library circulation API."""

    def __init__(
        self,
        *,
        base_url: str,
        prefix: str = "/api/v1",
        timeout: float = 15,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the server, e.g. ``http://localhost:5000``.
            prefix: Path prefix of the versioned API.
            timeout: Seconds to wait for each response.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
        """
        self.base_url = base_url.rstrip("/") + prefix
        self.timeout = timeout
        self.session = session or requests.Session()

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Tuple[Optional[Any], Optional[Error]]:
        """Perform an HTTP request to the API.

        Args:
            method: HTTP method (``GET``, ``POST``, ``PUT``, ``DELETE``).
            path: Path relative to the API prefix (e.g. ``/books/``).
            params: Query parameters to include in the request.
            json_body: JSON body to send with the request.
        Returns:
            A tuple ``(data, error)``.
        """
        url = f"{self.base_url}{path}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            kind = None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    kind = err_json.get("error")
                    message = err_json.get("detail") or err_json.get("message") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "kind": kind, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "kind": None, "message": str(exc)}

    def _list(self, path: str, params: Dict[str, Any] | None = None) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        data, error = self._request("GET", path, params=params)
        if error:
            return [], error
        return data or [], None

    # ------------------------------------------------------------------
    # Books
    # ------------------------------------------------------------------
    def add_book(self, isbn: str, title: str, author: str) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        return self._request("POST", "/books/", json_body={"ISBN": isbn, "title": title, "author": author})

    def get_book(self, isbn: str) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        return self._request("GET", f"/books/{isbn}")

    def list_books(self) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        return self._list("/books/")

    def list_available_books(self) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        """Books that can be issued.  An empty inventory comes back as a 404 error."""
        return self._list("/books/available")

    def delete_book(self, isbn: str) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        return self._request("DELETE", f"/books/delete/{isbn}")

    # ------------------------------------------------------------------
    # Circulation
    # ------------------------------------------------------------------
    def issue_book(
        self, isbn: str, *, mobile: str, borrower: str, due_date: date | str
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Issue a book.

        Args:
            isbn: ISBN of the book.
            mobile: Borrower's mobile number, recorded in the ledger.
            borrower: Borrower's name.
            due_date: Agreed return date (``date`` or ISO string).
        """
        if isinstance(due_date, date):
            due_date = due_date.isoformat()
        payload = {"mobile": mobile, "borrower": borrower, "dueDate": due_date}
        return self._request("POST", f"/books/issue/{isbn}", json_body=payload)

    def return_book(
        self, isbn: str, *, borrower_name: Optional[str] = None, mobile: Optional[str] = None
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        payload: Dict[str, Any] = {}
        if borrower_name:
            payload["borrowerName"] = borrower_name
        if mobile:
            payload["mobile"] = mobile
        return self._request("POST", f"/books/return/{isbn}", json_body=payload)

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------
    def list_members(self) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        return self._list("/members/")

    def add_member(self, name: str, mobile: str, email: str) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        return self._request(
            "POST", "/members/add", json_body={"name": name, "mobile": mobile, "email": email}
        )

    def get_member(self, book_id: str) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Member currently holding ``book_id``."""
        return self._request("GET", f"/members/{book_id}")

    def update_member(
        self, book_id: str, *, name: Optional[str] = None, mobile: Optional[str] = None
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        payload = {key: value for key, value in (("name", name), ("mobile", mobile)) if value}
        return self._request("PUT", f"/members/update/{book_id}", json_body=payload)

    def delete_member(self, book_id: str) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        return self._request("DELETE", f"/members/delete/{book_id}")

    # ------------------------------------------------------------------
    # Ledger and loans
    # ------------------------------------------------------------------
    def list_transactions(self, **filters: Any) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        """List ledger entries.  Accepts ``bookId``, ``memberId``, ``transactionType``, ``limit``, ``offset``."""
        return self._list("/transactions/", params=filters or None)

    def get_transaction(self, transaction_id: int) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        return self._request("GET", f"/transactions/{transaction_id}")

    def book_history(self, isbn: str) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        return self._list(f"/books/{isbn}/transactions")

    def list_loans(self, active: bool = False) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        params = {"active": "true"} if active else None
        return self._list("/loans/", params=params)

    def overdue_loans(self, as_of: date | None = None) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        params = {"asOf": as_of.isoformat()} if as_of else None
        return self._list("/loans/overdue", params=params)
