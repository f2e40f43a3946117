"""
API Services Layer.

Each module owns one resource. Operations take the Database handle, run in
a single transaction and return plain dicts ready for JSON.
"""
