"""
Top-level router of the REST API.

Aggregates the domain routers; ``main.py`` mounts the result under
``/api``.
"""

from fastapi import APIRouter

from .endpoints import books, borrow, members, reservations

router = APIRouter()

router.include_router(members.router, prefix="/members", tags=["members"])
router.include_router(books.router, prefix="/books", tags=["books"])
# borrow, return and the loan reports live at the API root
# (/borrow, /return, /borrowed), so no prefix here.
router.include_router(borrow.router, tags=["borrowing"])
router.include_router(reservations.router, prefix="/reservations", tags=["reservations"])
