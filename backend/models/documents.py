"""
AI document verification models.
"""

from pydantic import BaseModel, Field


class VerifyDocumentRequest(BaseModel):
    photo_data_uri: str = Field(
        ...,
        description="Document photo as a data URI: 'data:<mimetype>;base64,<encoded_data>'",
    )
    expected_type: str = Field(
        ...,
        min_length=1,
        description='Expected document type, e.g. "PAN Card" or "Aadhar Card"',
    )


class VerifyDocumentOutput(BaseModel):
    is_match: bool = Field(..., description="Whether the document matches the expected type")
    reason: str = Field(..., description="One-sentence explanation for the decision")
