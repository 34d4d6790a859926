"""
Top-level package for the Library API.

The service itself lives in ``library_api.app``; a thin HTTP client for
talking to a running instance lives in ``library_api.client``.
"""

__all__ = []
