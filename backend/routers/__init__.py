"""API Routers for CISS Workforce."""

from . import admin, attendance, auth, clients, documents, employees, exports, field_officers

__all__ = [
    "admin",
    "attendance",
    "auth",
    "clients",
    "documents",
    "employees",
    "exports",
    "field_officers",
]
