"""
Export Job Tracking

Provides persistent job records for spreadsheet exports.
"""

from .job_store import ExportJobStore, ExportJobStatus, ExportJob

__all__ = ["ExportJobStore", "ExportJobStatus", "ExportJob"]
