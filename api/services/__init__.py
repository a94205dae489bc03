"""
High-level use cases for the work orders API.

Each service module orchestrates repositories to implement business rules
(field validation, not-found handling, error wrapping).

Routers (FastAPI endpoints) call these services instead of manipulating
the JSON file directly.
"""
