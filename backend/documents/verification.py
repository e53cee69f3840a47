"""
AI document verification.

Checks whether an uploaded photo shows the document type the user claims it
is (e.g. a PAN Card rather than an Aadhar Card). The model is treated as an
opaque classifier: anything other than a well-formed {is_match, reason}
answer is a failure for that request.
"""

import base64
import binascii
import logging
import re
from dataclasses import dataclass

from pydantic import ValidationError

from exceptions import DocumentVerificationError, InvalidArgumentError
from llm.base import BaseLLMProvider
from models.documents import VerifyDocumentOutput

logger = logging.getLogger(__name__)

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)

VERIFICATION_PROMPT = """You are an expert document verification agent. Your task is to determine if the document in the provided image matches the expected document type.

The user expects the document to be a '{expected_type}'.

Analyze the image and determine if it is indeed a '{expected_type}'.

- If the document in the image IS a '{expected_type}', set is_match to true.
- If the document in the image IS NOT a '{expected_type}', set is_match to false. For example, if the user expects a "School Certificate" but uploads an "Aadhar Card", that is a mismatch.
- Provide a very short, one-sentence reason for your decision.

Respond with a JSON object of the form {{"is_match": true, "reason": "..."}}."""


@dataclass
class DecodedImage:
    mime_type: str
    data: bytes


def parse_data_uri(data_uri: str) -> DecodedImage:
    """Decode 'data:<mimetype>;base64,<encoded_data>' into bytes."""
    match = _DATA_URI.match((data_uri or "").strip())
    if not match:
        raise InvalidArgumentError(
            "Photo must be a base64 data URI: data:<mimetype>;base64,<encoded_data>",
            field="photo_data_uri",
        )
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError):
        raise InvalidArgumentError("Photo data is not valid base64.", field="photo_data_uri")
    if not data:
        raise InvalidArgumentError("Photo data is empty.", field="photo_data_uri")
    return DecodedImage(mime_type=match.group("mime"), data=data)


class DocumentVerifier:
    """Classifies a document photo against an expected document type."""

    def __init__(self, provider: BaseLLMProvider):
        self.provider = provider

    async def verify(self, photo_data_uri: str, expected_type: str) -> VerifyDocumentOutput:
        expected_type = (expected_type or "").strip()
        if not expected_type:
            raise InvalidArgumentError("Expected document type is required.", field="expected_type")

        image = parse_data_uri(photo_data_uri)

        try:
            response = await self.provider.generate_with_image(
                prompt=VERIFICATION_PROMPT.format(expected_type=expected_type),
                image_data=image.data,
                mime_type=image.mime_type,
                json_output=True,
            )
        except Exception as e:
            logger.error(f"Document verification call failed: {type(e).__name__}")
            raise DocumentVerificationError() from e

        parsed = self.provider.parse_json(response)
        if parsed is None:
            logger.warning("Document verification returned no JSON object")
            raise DocumentVerificationError(raw_response=response)

        try:
            result = VerifyDocumentOutput.model_validate(parsed)
        except ValidationError:
            logger.warning(f"Document verification returned unexpected fields: {sorted(parsed)}")
            raise DocumentVerificationError(raw_response=response)

        logger.info(f"Document verification for '{expected_type}': match={result.is_match}")
        return result
