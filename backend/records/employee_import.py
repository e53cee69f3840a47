"""
Bulk employee import from CSV.

The sheet uses the column headers of the legacy bulk-upload template
(FirstName, LastName, PhoneNumber, ...). Headers and values are trimmed;
blank cells fall back to the enrollment defaults. Rows that do not make a
valid enrollment are skipped and reported with their line number instead of
failing the whole file.
"""

import io
import logging
from datetime import datetime
from typing import Optional
from uuid import uuid4

import pandas as pd
from pydantic import ValidationError

from documents.verification import parse_data_uri
from exceptions import InvalidArgumentError
from models.common import phone_digits
from models.employee import EmployeeCreate, EmployeeStatus
from records.employee_store import EmployeeStore, utcnow
from storage.blob_store import BlobStore

logger = logging.getLogger(__name__)

# Rows written per transaction
IMPORT_BATCH_SIZE = 400

# CSV header -> EmployeeCreate field, for plain text columns
TEXT_COLUMNS = {
    "FirstName": "first_name",
    "LastName": "last_name",
    "EmailAddress": "email_address",
    "FatherName": "father_name",
    "MotherName": "mother_name",
    "SpouseName": "spouse_name",
    "District": "district",
    "IDProofType": "identity_proof_type",
    "IDProofNumber": "identity_proof_number",
    "BankAccountNumber": "bank_account_number",
    "IFSCCode": "ifsc_code",
    "BankName": "bank_name",
    "FullAddress": "full_address",
    "PANNumber": "pan_number",
    "EPFUANNumber": "epf_uan_number",
    "ESICNumber": "esic_number",
    "ResourceIDNumber": "resource_id_number",
    "IDProofDocumentURL": "identity_proof_url_front",
    "BankPassbookStatementURL": "bank_passbook_statement_url",
}

DEFAULTS = {
    "ClientName": "Unassigned",
    "Gender": "Other",
    "MaritalStatus": "Unmarried",
    "Status": "Active",
}


def read_csv_rows(content: bytes) -> list[dict]:
    """Parse CSV bytes into trimmed string rows. Empty cells become ""."""
    try:
        frame = pd.read_csv(
            io.BytesIO(content),
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
        )
    except pd.errors.EmptyDataError:
        return []
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise InvalidArgumentError(f"Error parsing CSV: {e}", field="file")

    if frame.empty:
        return []
    frame.columns = [str(c).strip() for c in frame.columns]
    frame = frame.apply(lambda col: col.str.strip())
    return frame.to_dict(orient="records")


def parse_date(value: str) -> Optional[datetime]:
    if not value:
        return None
    parsed = pd.to_datetime(value, errors="coerce", utc=True)
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def row_to_enrollment(row: dict) -> dict:
    """Map one CSV row onto EmployeeCreate fields."""
    def cell(header: str) -> str:
        return row.get(header) or DEFAULTS.get(header, "")

    fields = {field: cell(header) for header, field in TEXT_COLUMNS.items()}
    # Optional columns stay null rather than ""
    for field in ("email_address", "spouse_name", "identity_proof_type", "identity_proof_number",
                  "pan_number", "epf_uan_number", "esic_number", "resource_id_number",
                  "identity_proof_url_front", "bank_passbook_statement_url"):
        fields[field] = fields[field] or None

    joining_date = parse_date(cell("JoiningDate"))
    if joining_date is None:
        logger.warning(f"Invalid or missing JoiningDate for {cell('PhoneNumber') or 'row'}, using now")
        joining_date = utcnow()
    date_of_birth = parse_date(cell("DateOfBirth"))

    fields.update({
        "client_name": cell("ClientName"),
        "phone_number": phone_digits(cell("PhoneNumber")),
        "gender": cell("Gender").capitalize(),
        "marital_status": cell("MaritalStatus").capitalize(),
        "joining_date": joining_date,
        "date_of_birth": date_of_birth.date() if date_of_birth else None,
    })
    return fields


class EmployeeCsvImporter:
    """Turns an uploaded CSV into enrolled employee records."""

    def __init__(
        self,
        store: EmployeeStore,
        blob_store: Optional[BlobStore] = None,
        photo_prefix: str = "employee_photos",
        photo_url_expiry_seconds: int = 10 * 365 * 24 * 60 * 60,
        batch_size: int = IMPORT_BATCH_SIZE,
    ):
        self.store = store
        self.blob_store = blob_store
        self.photo_prefix = photo_prefix
        self.photo_url_expiry_seconds = photo_url_expiry_seconds
        self.batch_size = batch_size

    async def _upload_photo(self, data_uri: str, phone_number: str) -> Optional[str]:
        """Store a PhotoBlob data URI and return a signed URL, or None if it is unusable."""
        try:
            photo = parse_data_uri(data_uri)
        except InvalidArgumentError:
            logger.warning(f"Invalid PhotoBlob for {phone_number}, skipping photo")
            return None
        if not photo.mime_type.startswith("image/") or self.blob_store is None:
            return None

        extension = photo.mime_type.split("/", 1)[1]
        path = f"{self.photo_prefix}/{phone_number or uuid4()}/{uuid4()}.{extension}"
        await self.blob_store.upload_bytes(path, photo.data, content_type=photo.mime_type)
        return await self.blob_store.create_signed_url(path, self.photo_url_expiry_seconds)

    async def import_csv(self, content: bytes) -> dict:
        """
        Enroll every valid row of the CSV.

        Returns counts plus the rows that were skipped. Raises
        InvalidArgumentError when the file has no data rows or no valid row.
        """
        rows = read_csv_rows(content)
        if not rows:
            raise InvalidArgumentError("CSV contains no data rows.", field="file")

        records = []
        skipped = []
        # Line 1 is the header
        for line, row in enumerate(rows, start=2):
            fields = row_to_enrollment(row)
            status = row.get("Status") or DEFAULTS["Status"]
            try:
                enrollment = EmployeeCreate(**fields)
                status = EmployeeStatus(status)
            except (ValidationError, ValueError) as e:
                reason = (
                    "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
                    if isinstance(e, ValidationError)
                    else f"unknown status '{status}'"
                )
                logger.warning(f"Skipping CSV line {line}: {reason}")
                skipped.append({"line": line, "reason": reason})
                continue

            photo_blob = row.get("PhotoBlob") or ""
            if photo_blob.startswith("data:image/"):
                url = await self._upload_photo(photo_blob, enrollment.phone_number)
                if url:
                    enrollment.profile_picture_url = url

            records.append(self.store.new_record(enrollment, status))

        if not records:
            raise InvalidArgumentError(
                "No valid employee records could be processed from the CSV.", field="file"
            )

        processed = 0
        for start in range(0, len(records), self.batch_size):
            processed += await self.store.create_many(records[start:start + self.batch_size])
            logger.info(f"Import batch {start // self.batch_size + 1} committed ({processed} records so far)")

        return {
            "success": True,
            "message": f"Employee data imported successfully. {processed} records processed.",
            "records_processed": processed,
            "skipped": skipped,
        }
