"""
Persistence adapters.

These modules encapsulate how work orders are stored/retrieved (today a JSON
file). Services depend on the repository methods rather than touching the file.
"""
