"""
Per-domain repository modules for database access.

`users` holds account lookups; `scan_records` holds the SQL-backed scan record
repository that mirrors the in-memory Repository Core contract.
"""
