"""
Per-domain repository modules for database access.

Only read paths live here; the service never writes to the store.
"""
