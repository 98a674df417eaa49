"""Unit tests for the database layer.

Entity defaults and repository queries are exercised against an in-memory
SQLite database, so no external database service is needed.
"""
