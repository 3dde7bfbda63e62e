"""Tests for the garden planner data-access layer.

Most tests run against in-memory SQLite (see ``sqlite_trgm``); PostgreSQL-only
SQL is checked by compiling statements with the postgresql dialect.
"""
