"""Provider-neutral conversation and message content models."""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Role of a persisted conversation turn."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM_CONTEXT = "system"  # Background context, not a user utterance


class MessageRole(str, Enum):
    """Role of a message sent to a model."""
    USER = "user"
    ASSISTANT = "assistant"


class ImageKind(str, Enum):
    """Supported image formats, valued by canonical mimetype."""
    JPEG = "image/jpeg"
    PNG = "image/png"
    GIF = "image/gif"
    WEBP = "image/webp"
    HEIC = "image/heic"
    HEIF = "image/heif"
    SVG = "image/svg+xml"


class DocumentKind(str, Enum):
    """Supported document formats, valued by canonical mimetype."""
    PDF = "application/pdf"
    TXT = "text/plain"
    HTML = "text/html"
    CSS = "text/css"
    MARKDOWN = "text/markdown"
    CSV = "text/csv"
    XML = "text/xml"
    RTF = "text/rtf"
    JAVASCRIPT = "text/javascript"
    PYTHON = "text/x-python"

    @property
    def is_text(self) -> bool:
        """Whether the document content is readable text."""
        return self is not DocumentKind.PDF


class ConversationTurn(BaseModel):
    """One persisted chat turn. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str = Field(description="Turn text")


class Attachment(BaseModel):
    """A file sent with a single request; never persisted."""

    model_config = ConfigDict(frozen=True)

    payload: str = Field(description="Base64 content without data-URI prefix")
    mimetype: str


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class ImagePart:
    data: bytes
    kind: ImageKind


@dataclass(frozen=True)
class DocumentPart:
    data: bytes
    kind: DocumentKind


ContentPart = Union[TextPart, ImagePart, DocumentPart]


@dataclass(frozen=True)
class Message:
    """Normalized unit sent to a model.

    Always holds at least one ``TextPart`` so a model is never asked to
    reason over attachments without an instruction.
    """

    role: MessageRole
    parts: Tuple[ContentPart, ...]

    def __post_init__(self):
        if not any(isinstance(part, TextPart) for part in self.parts):
            raise ValueError("Message must contain at least one text part")

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(role=MessageRole.USER, parts=(TextPart(text),))

    @classmethod
    def assistant(cls, text: str) -> "Message":
        return cls(role=MessageRole.ASSISTANT, parts=(TextPart(text),))

    @property
    def text(self) -> str:
        """Concatenated text of all text parts."""
        return "\n".join(
            part.text for part in self.parts if isinstance(part, TextPart)
        )

    @property
    def has_attachments(self) -> bool:
        return any(not isinstance(part, TextPart) for part in self.parts)
