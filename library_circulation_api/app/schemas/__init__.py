"""
Pydantic schema definitions for API payloads.

Each domain (books, members, loans, transactions) defines its own
Pydantic models for request and response bodies.  Schemas are separated
from the SQLite tables to decouple API representation from persistence.
"""
