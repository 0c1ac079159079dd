"""
Top‑level package for the Library Circulation API.

All functionality lives in submodules under ``app``: the circulation
state machine in ``app.services``, the HTTP layer in ``app.api`` and
configuration, logging and the SQLite store in ``app.core``.
"""

__all__ = []
