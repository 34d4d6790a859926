"""Library API client.

A thin wrapper around the library service's REST API built on the
``requests`` library.  Every method returns a tuple ``(data, error)``:
on success ``data`` holds the decoded JSON body and ``error`` is
``None``; on failure ``data`` is ``None`` and ``error`` is a dictionary
with the keys ``status_code`` and ``message`` (plus ``error`` and
``details`` when the server supplied them).

Example::

    client = LibraryAPIClient(base_url="http://127.0.0.1:3000")
    member, error = client.create_member({"name": "Jane", "age": 30})
    if error:
        print(error["message"])

Any object with a ``requests``-compatible ``request`` method can be
passed as ``session``, for instance a FastAPI ``TestClient``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class LibraryAPIClient:
    """Client for the members, books, borrowing and reservation endpoints."""

    def __init__(
        self,
        *,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the service, e.g. ``http://127.0.0.1:3000``.
                The ``/api`` prefix is added by the client.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request and decode the JSON response.

        Args:
            method: HTTP method (``GET``, ``POST``, ``PUT``, ``DELETE``).
            path: Path relative to :attr:`base_url` (e.g. ``/api/members``).
            params: Query parameters to include in the request.
            json_body: JSON body to send with the request.
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
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

        try:
            body = response.json() if response.content else None
        except ValueError:
            body = None

        if response.status_code >= 400:
            error: Dict[str, Any] = {"status_code": response.status_code, "message": response.text}
            if isinstance(body, dict):
                error["message"] = body.get("message") or str(body)
                for key in ("error", "details"):
                    if key in body:
                        error[key] = body[key]
            logger.error("API request failed (%s): %s", response.status_code, error["message"])
            return None, error
        return body, None

    @staticmethod
    def _drop_none(params: Dict[str, Any]) -> Dict[str, Any]:
        return {key: value for key, value in params.items() if value is not None}

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------
    def health(self) -> Result:
        return self._request("GET", "/health")

    # ------------------------------------------------------------------
    # Member operations
    # ------------------------------------------------------------------
    def create_member(self, payload: Dict[str, Any]) -> Result:
        return self._request("POST", "/api/members", json_body=payload)

    def get_member(self, member_id: int) -> Result:
        return self._request("GET", f"/api/members/{member_id}")

    def list_members(self) -> Result:
        """Return the member summaries (without ``has_borrowed``)."""
        data, error = self._request("GET", "/api/members")
        if error:
            return None, error
        return data.get("members", []), None

    def update_member(self, member_id: int, payload: Dict[str, Any]) -> Result:
        return self._request("PUT", f"/api/members/{member_id}", json_body=payload)

    def delete_member(self, member_id: int) -> Result:
        return self._request("DELETE", f"/api/members/{member_id}")

    # ------------------------------------------------------------------
    # Book operations
    # ------------------------------------------------------------------
    def create_book(self, payload: Dict[str, Any]) -> Result:
        return self._request("POST", "/api/books", json_body=payload)

    def get_book(self, book_id: int) -> Result:
        return self._request("GET", f"/api/books/{book_id}")

    def list_books(self) -> Result:
        data, error = self._request("GET", "/api/books")
        if error:
            return None, error
        return data.get("books", []), None

    def update_book(self, book_id: int, payload: Dict[str, Any]) -> Result:
        return self._request("PUT", f"/api/books/{book_id}", json_body=payload)

    def delete_book(self, book_id: int) -> Result:
        return self._request("DELETE", f"/api/books/{book_id}")

    def search_books(self, q: Optional[str] = None, **filters: Any) -> Result:
        """Search the catalogue.

        Keyword arguments are passed through as query parameters
        (``category``, ``availability``, ``sort_by``, ``page`` ...).
        Booleans are sent as ``"true"``/``"false"``.
        """
        params = self._drop_none({"q": q, **filters})
        for key, value in params.items():
            if isinstance(value, bool):
                params[key] = "true" if value else "false"
        return self._request("GET", "/api/books/search", params=params)

    # ------------------------------------------------------------------
    # Borrowing operations
    # ------------------------------------------------------------------
    def borrow_book(self, member_id: int, book_id: int) -> Result:
        return self._request("POST", "/api/borrow", json_body={"member_id": member_id, "book_id": book_id})

    def return_book(self, member_id: int, book_id: int) -> Result:
        return self._request("POST", "/api/return", json_body={"member_id": member_id, "book_id": book_id})

    def list_borrowed_books(self) -> Result:
        data, error = self._request("GET", "/api/borrowed")
        if error:
            return None, error
        return data.get("borrowed_books", []), None

    def get_borrowing_history(self, member_id: int) -> Result:
        return self._request("GET", f"/api/borrow/history/{member_id}")

    def list_overdue_books(self) -> Result:
        data, error = self._request("GET", "/api/borrow/overdue")
        if error:
            return None, error
        return data.get("overdue_books", []), None

    # ------------------------------------------------------------------
    # Reservation operations
    # ------------------------------------------------------------------
    def create_reservation(self, payload: Dict[str, Any]) -> Result:
        return self._request("POST", "/api/reservations", json_body=payload)

    def list_reservations(
        self,
        member_id: Optional[int] = None,
        book_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> Result:
        params = self._drop_none({"member_id": member_id, "book_id": book_id, "status": status})
        data, error = self._request("GET", "/api/reservations", params=params)
        if error:
            return None, error
        return data.get("reservations", []), None

    def get_reservation(self, reservation_id: str) -> Result:
        return self._request("GET", f"/api/reservations/{reservation_id}")

    def get_reservation_queue(self, book_id: int) -> Result:
        return self._request("GET", f"/api/reservations/queue/{book_id}")

    def cancel_reservation(self, reservation_id: str) -> Result:
        return self._request("POST", f"/api/reservations/{reservation_id}/cancel")
