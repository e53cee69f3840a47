"""
FastAPI Dependency Injection Module

Builds the store, storage, pipeline, verifier and claims handles that route
handlers receive. Tests replace any of them through app.dependency_overrides.
"""
import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends

from auth.admin_client import UserDirectory
from auth.claims import AdminClaimsService
from auth.field_officers import FieldOfficerService
from auth.supabase_client import get_supabase_admin
from config import Settings
from database import db
from documents.verification import DocumentVerifier
from exceptions import InternalError
from exports.pipeline import ExportJobPipeline
from jobs.job_store import ExportJobStore
from llm.base import BaseLLMProvider
from llm.gemini_provider import GeminiProvider
from records.attendance_store import AttendanceStore
from records.client_store import ClientStore
from records.employee_import import EmployeeCsvImporter
from records.employee_store import EmployeeStore
from records.field_officer_store import FieldOfficerStore
from storage.blob_store import BlobStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton"""
    return Settings()


# Record stores are process-wide: in memory-only mode they hold the data.
_employee_store: Optional[EmployeeStore] = None
_job_store: Optional[ExportJobStore] = None
_attendance_store: Optional[AttendanceStore] = None
_client_store: Optional[ClientStore] = None
_field_officer_store: Optional[FieldOfficerStore] = None


def _connection():
    return db if db.is_connected else None


def get_employee_store() -> EmployeeStore:
    global _employee_store
    if _employee_store is None:
        _employee_store = EmployeeStore(db_connection=_connection())
    return _employee_store


def get_job_store() -> ExportJobStore:
    global _job_store
    if _job_store is None:
        _job_store = ExportJobStore(db_connection=_connection())
    return _job_store


def get_attendance_store() -> AttendanceStore:
    global _attendance_store
    if _attendance_store is None:
        _attendance_store = AttendanceStore(db_connection=_connection())
    return _attendance_store


def get_client_store() -> ClientStore:
    global _client_store
    if _client_store is None:
        _client_store = ClientStore(db_connection=_connection())
    return _client_store


def get_field_officer_store() -> FieldOfficerStore:
    global _field_officer_store
    if _field_officer_store is None:
        _field_officer_store = FieldOfficerStore(db_connection=_connection())
    return _field_officer_store


async def init_stores() -> None:
    """
    Create tables and fail exports orphaned by a previous process.

    Called once from the application lifespan, after the database connects.
    """
    reset_stores()
    stores = (
        get_employee_store(),
        get_job_store(),
        get_attendance_store(),
        get_client_store(),
        get_field_officer_store(),
    )
    for store in stores:
        await store.init_table()

    interrupted = await get_job_store().mark_processing_as_error()
    if interrupted > 0:
        logger.warning(f"Marked {interrupted} interrupted export jobs as error")


def reset_stores() -> None:
    """Drop store instances (for testing and re-initialization)"""
    global _employee_store, _job_store, _attendance_store, _client_store, _field_officer_store
    _employee_store = None
    _job_store = None
    _attendance_store = None
    _client_store = None
    _field_officer_store = None


def get_blob_store(settings: Settings = Depends(get_settings)) -> BlobStore:
    """Blob store over the service-role client (unconfigured stores fail on use)"""
    return BlobStore(client=get_supabase_admin(), bucket=settings.storage_bucket)


def get_employee_importer(
    employee_store: EmployeeStore = Depends(get_employee_store),
    blob_store: BlobStore = Depends(get_blob_store),
    settings: Settings = Depends(get_settings),
) -> EmployeeCsvImporter:
    return EmployeeCsvImporter(
        store=employee_store,
        blob_store=blob_store,
        photo_prefix=settings.employee_photo_prefix,
        photo_url_expiry_seconds=settings.photo_url_expiry_seconds,
    )


def get_export_pipeline(
    employee_store: EmployeeStore = Depends(get_employee_store),
    job_store: ExportJobStore = Depends(get_job_store),
    blob_store: BlobStore = Depends(get_blob_store),
    settings: Settings = Depends(get_settings),
) -> ExportJobPipeline:
    return ExportJobPipeline(
        employee_store=employee_store,
        job_store=job_store,
        blob_store=blob_store,
        export_prefix=settings.export_prefix,
        url_expiry_seconds=settings.export_url_expiry_seconds,
    )


# LLM provider cache, keyed by model name
_llm_provider_cache: dict[str, BaseLLMProvider] = {}


def get_llm_provider(settings: Settings = Depends(get_settings)) -> BaseLLMProvider:
    """Get the Gemini provider used for document verification"""
    if not settings.google_api_key:
        raise InternalError("Document verification is not configured.")

    if settings.gemini_model not in _llm_provider_cache:
        _llm_provider_cache[settings.gemini_model] = GeminiProvider(
            api_key=settings.google_api_key,
            model=settings.gemini_model,
        )
    return _llm_provider_cache[settings.gemini_model]


def reset_llm_provider_cache():
    """Reset LLM provider cache (for testing)"""
    _llm_provider_cache.clear()


def get_document_verifier(
    provider: BaseLLMProvider = Depends(get_llm_provider),
) -> DocumentVerifier:
    return DocumentVerifier(provider=provider)


def get_claims_service() -> AdminClaimsService:
    return AdminClaimsService(UserDirectory(get_supabase_admin()))


def get_field_officer_service(
    store: FieldOfficerStore = Depends(get_field_officer_store),
) -> FieldOfficerService:
    return FieldOfficerService(UserDirectory(get_supabase_admin()), store)
