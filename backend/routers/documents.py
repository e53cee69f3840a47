"""
Document verification API.

Used by the enrollment form before a document photo is accepted.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from auth.dependencies import get_optional_user
from auth.models import User
from dependencies import get_document_verifier
from documents.verification import DocumentVerifier
from models.documents import VerifyDocumentOutput, VerifyDocumentRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/verify", response_model=VerifyDocumentOutput)
async def verify_document(
    request: VerifyDocumentRequest,
    current_user: Optional[User] = Depends(get_optional_user),
    verifier: DocumentVerifier = Depends(get_document_verifier),
):
    """Check that a document photo is the expected document type."""
    return await verifier.verify(request.photo_data_uri, request.expected_type)
