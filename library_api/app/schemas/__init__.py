"""
Pydantic schema definitions for API payloads.

Each domain (members, books, borrowing, reservations) defines its own
request and response models.  Request models carry the route-level
validation rules and the exact messages returned to clients; entity
models in ``models`` carry the domain invariants.
"""
