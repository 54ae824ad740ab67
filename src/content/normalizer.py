"""Content normalizer: attachments and stored history to model messages."""

import base64
import binascii
from typing import Dict, List, Optional, Sequence

from src.content.models import (
    Attachment,
    ContentPart,
    ConversationTurn,
    DocumentKind,
    DocumentPart,
    ImageKind,
    ImagePart,
    Message,
    MessageRole,
    Role,
    TextPart,
)
from src.utils.logger import get_logger

logger = get_logger()

SYSTEM_CONTEXT_MARKER = "[System Context]:"

# Mimetype tables (matched case-insensitively)
IMAGE_KINDS: Dict[str, ImageKind] = {
    "image/jpeg": ImageKind.JPEG,
    "image/jpg": ImageKind.JPEG,
    "image/png": ImageKind.PNG,
    "image/gif": ImageKind.GIF,
    "image/webp": ImageKind.WEBP,
    "image/heic": ImageKind.HEIC,
    "image/heif": ImageKind.HEIF,
    "image/svg+xml": ImageKind.SVG,
}

DOCUMENT_KINDS: Dict[str, DocumentKind] = {
    "application/pdf": DocumentKind.PDF,
    "text/plain": DocumentKind.TXT,
    "text/html": DocumentKind.HTML,
    "text/css": DocumentKind.CSS,
    "text/markdown": DocumentKind.MARKDOWN,
    "text/x-markdown": DocumentKind.MARKDOWN,
    "text/csv": DocumentKind.CSV,
    "text/xml": DocumentKind.XML,
    "application/xml": DocumentKind.XML,
    "text/rtf": DocumentKind.RTF,
    "application/rtf": DocumentKind.RTF,
    "text/javascript": DocumentKind.JAVASCRIPT,
    "application/javascript": DocumentKind.JAVASCRIPT,
    "text/x-python": DocumentKind.PYTHON,
    "application/x-python": DocumentKind.PYTHON,
}


def _normalize_mimetype(mimetype: str) -> str:
    """Lowercase and drop parameters such as ``; charset=utf-8``."""
    return mimetype.split(";", 1)[0].strip().lower()


def _decode_payload(payload: str) -> Optional[bytes]:
    try:
        return base64.b64decode(payload)
    except (binascii.Error, ValueError):
        return None


def attachment_to_part(attachment: Attachment) -> Optional[ContentPart]:
    """
    Convert one attachment into a content part.

    Args:
        attachment: Attachment with base64 payload and mimetype

    Returns:
        ImagePart or DocumentPart, or None if the attachment is unsupported
    """
    mimetype = _normalize_mimetype(attachment.mimetype)

    image_kind = IMAGE_KINDS.get(mimetype)
    document_kind = DOCUMENT_KINDS.get(mimetype) if image_kind is None else None

    if image_kind is None and document_kind is None:
        logger.warning(f"Dropping attachment with unsupported mimetype: '{attachment.mimetype}'")
        return None

    data = _decode_payload(attachment.payload)
    if data is None:
        logger.warning(f"Dropping attachment with undecodable payload ({mimetype})")
        return None

    if image_kind is not None:
        return ImagePart(data=data, kind=image_kind)
    return DocumentPart(data=data, kind=document_kind)


def build_message(prompt: str, attachments: Sequence[Attachment] = ()) -> Message:
    """
    Build the user message for one request.

    Attachment parts come first, in input order, and the prompt text is
    always the final part. Unsupported attachments are dropped, so this
    never fails.

    Args:
        prompt: User prompt text
        attachments: Attachments sent with the request

    Returns:
        Message with attachment parts followed by the prompt text
    """
    parts: List[ContentPart] = []

    for attachment in attachments:
        part = attachment_to_part(attachment)
        if part is not None:
            parts.append(part)

    if attachments:
        logger.debug(f"Built message with {len(parts)}/{len(attachments)} attachments")

    parts.append(TextPart(prompt))
    return Message(role=MessageRole.USER, parts=tuple(parts))


def normalize_turn(turn: ConversationTurn) -> Message:
    """Map a stored conversation turn to a role-tagged message."""
    if turn.role == Role.ASSISTANT:
        return Message.assistant(turn.content)
    if turn.role == Role.SYSTEM_CONTEXT:
        return Message.user(f"{SYSTEM_CONTEXT_MARKER} {turn.content}")
    return Message.user(turn.content)


def normalize_history(turns: Sequence[ConversationTurn]) -> List[Message]:
    """Map stored history, oldest first, to model messages in the same order."""
    return [normalize_turn(turn) for turn in turns]
