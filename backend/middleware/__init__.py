"""
Middleware package for the CISS Workforce backend.

Includes:
- register_exception_handlers: typed error responses for WorkforceException
"""

from middleware.error_handler import (
    register_exception_handlers,
    unhandled_exception_handler,
    workforce_exception_handler,
)

__all__ = [
    "register_exception_handlers",
    "unhandled_exception_handler",
    "workforce_exception_handler",
]
