"""Request and response models for the chat API."""

from typing import List, Optional

from pydantic import BaseModel, Field


class FileAttachment(BaseModel):
    base64: str = Field(description="Base64 content, optionally with a data-URI prefix")
    mimetype: str = ""


class ChatRequest(BaseModel):
    prompt: str
    session_id: Optional[str] = None
    files: Optional[List[FileAttachment]] = None


class ChatResponse(BaseModel):
    response: str
    session_id: str


class ErrorResponse(BaseModel):
    error: str
