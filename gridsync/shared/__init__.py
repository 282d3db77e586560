"""
Shared module package.

Contains cross-cutting concerns:
- Domain error to HTTP status mapping
- Centralized exception handlers
- Logging configuration
"""
