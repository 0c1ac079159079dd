"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules.  The circulation rules live in ``services``, the HTTP
routes in ``api/v1/endpoints``, request and response models in
``schemas`` and configuration, logging and the SQLite store in
``core``.
"""

from .main import app  # noqa: F401
