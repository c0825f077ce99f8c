"""
Shared, cross-cutting code for the API.

`core/` holds the small building blocks every entity package uses (DB wiring,
the persistence gateway, settings, logging, error taxonomy). Keep entity
specific rules in the corresponding package (e.g. `tickets/`).
"""
