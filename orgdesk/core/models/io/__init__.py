"""
API I/O schemas.

Pydantic models defining the request and response contract of the HTTP API,
grouped by domain.
"""
