"""
Record stores for employees, attendance logs and clients.

Each store writes to PostgreSQL when given a connection and keeps records in
memory otherwise.
"""

from .employee_store import EmployeeStore
from .attendance_store import AttendanceStore
from .client_store import ClientStore

__all__ = ["EmployeeStore", "AttendanceStore", "ClientStore"]
