"""
Application package initializer.

The project is split the same way for every domain (members, books,
borrowing, reservations): entity models in ``models``, in-memory
services in ``services``, pydantic payloads in ``schemas`` and HTTP
routes in ``api/endpoints``.  Importing this package builds the
default application instance.
"""

from .main import app  # noqa: F401
