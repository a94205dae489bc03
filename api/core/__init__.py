"""
Core utilities shared across the work orders API.

This package hosts configuration helpers (env vars, storage paths) and
cross-cutting pieces such as HTTP middleware. Services and routers depend
on these primitives instead of reading the environment themselves.
"""
