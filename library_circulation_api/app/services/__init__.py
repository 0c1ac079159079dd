"""
Service layer abstraction.

Each service encapsulates business logic for a domain and receives the
``Database`` handle it works on, so API handlers and tests can point
services at any SQLite file.  ``CirculationService`` owns every book
status change; the others are the read side and plain record edits.
"""
