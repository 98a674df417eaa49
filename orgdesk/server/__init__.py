"""
orgdesk Server Package.

This package contains the web server implementation for orgdesk.
It includes the API definition, core configuration, middleware,
exception handlers and the request-scoped service layer.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Core configurations and constants.
    middleware: Request logging and timing.
    exception_handlers: Uniform ``{"error": ...}`` responses.
    services: Dependencies and request-scoped business logic.
"""
