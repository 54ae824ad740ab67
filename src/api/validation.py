"""Validation of chat requests before they reach the orchestrator."""

from typing import List, Optional

from src.api.request import FileAttachment
from src.content.models import Attachment
from src.utils.config import get_settings


class InvalidRequestError(Exception):
    """Raised for malformed, oversized or empty requests."""
    pass


def strip_data_uri_prefix(payload: str) -> str:
    """
    Remove a 'data:<mime>;base64,' prefix from a base64 payload.

    Args:
        payload: Raw base64 string, possibly a data URI

    Returns:
        Bare base64 content
    """
    head, sep, tail = payload.partition(",")
    if sep and "base64" in head:
        return tail
    return payload


def validate_prompt(prompt: str) -> str:
    """Trim the prompt and check it is non-empty and within the length limit."""
    settings = get_settings()
    trimmed = prompt.strip()

    if not trimmed:
        raise InvalidRequestError("The prompt cannot be empty")

    if len(trimmed) > settings.max_prompt_chars:
        raise InvalidRequestError(
            f"The prompt exceeds the limit of {settings.max_prompt_chars:,} characters"
        )

    return trimmed


def validate_files(files: Optional[List[FileAttachment]]) -> List[Attachment]:
    """
    Check attachment count and sizes and strip data-URI prefixes.

    Args:
        files: Files from the request body

    Returns:
        Attachments ready for the content normalizer
    """
    settings = get_settings()
    files = files or []

    if len(files) > settings.max_files_per_request:
        raise InvalidRequestError(
            f"No more than {settings.max_files_per_request} files can be sent per message"
        )

    attachments = []
    for number, file in enumerate(files, start=1):
        payload = strip_data_uri_prefix(file.base64)

        if not payload:
            raise InvalidRequestError(f"File {number} has empty content")

        if len(payload) > settings.max_file_size_bytes:
            limit_mb = settings.max_file_size_bytes // (1024 * 1024)
            raise InvalidRequestError(f"File {number} exceeds the {limit_mb}MB limit")

        if not file.mimetype.strip():
            raise InvalidRequestError(f"File {number} has no mimetype")

        attachments.append(Attachment(payload=payload, mimetype=file.mimetype.strip()))

    return attachments
