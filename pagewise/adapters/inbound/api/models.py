"""Pydantic models for API requests and responses."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from ....core.domain import ChatMessage, Document


class MessagePart(BaseModel):
    """A typed part of a UI message; only text parts carry content."""

    type: str = Field(..., description="Part type, e.g. 'text'")
    text: str | None = Field(None, description="Text of a text part")


class ChatMessageModel(BaseModel):
    """A single message in the conversation."""

    role: Literal["user", "assistant", "system"] = Field(..., description="Message author role")
    content: str = Field("", description="Plain text content")
    parts: list[MessagePart] = Field(
        default_factory=list,
        description="UI message parts; text parts are joined when content is empty",
    )

    def to_domain(self) -> ChatMessage:
        text = self.content
        if not text and self.parts:
            text = " ".join(part.text or "" for part in self.parts if part.type == "text")
        return ChatMessage(role=self.role, content=text)


class ChatRequest(BaseModel):
    """Request model for a chat turn."""

    messages: list[ChatMessageModel] = Field(
        default_factory=list,
        description="Conversation so far, oldest first; the last user message is the query",
        json_schema_extra={
            "example": [{"role": "user", "content": "What did I save about vector databases?"}]
        },
    )


class IngestRequest(BaseModel):
    """Request model for saving a page."""

    url: str | None = Field(
        None,
        description="Web page to scrape and add to the corpus",
        json_schema_extra={"example": "https://example.com/article"},
    )


class DocumentInfo(BaseModel):
    """A saved document without its content."""

    id: str = Field(..., description="Document id")
    url: str = Field(..., description="Source URL")
    title: str = Field(..., description="Page title")
    created_at: datetime = Field(..., description="When the page was saved")

    @classmethod
    def from_domain(cls, document: Document) -> "DocumentInfo":
        return cls(
            id=document.doc_id,
            url=document.url,
            title=document.display_name,
            created_at=document.created_at,
        )


class IngestResponse(BaseModel):
    """Response model for a successful ingestion."""

    success: bool = True
    document: DocumentInfo
    chunk_count: int = Field(..., ge=0, description="Number of chunks stored")


class DeleteResponse(BaseModel):
    success: bool = True


class GraphNodeModel(BaseModel):
    id: str
    name: str
    url: str


class GraphLinkModel(BaseModel):
    source: str
    target: str
    value: float = Field(..., description="Cosine similarity of the two documents")


class GraphResponse(BaseModel):
    """Similarity graph over the caller's documents."""

    nodes: list[GraphNodeModel] = Field(default_factory=list)
    links: list[GraphLinkModel] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")
    vector_store: str = Field(..., description="Vector store backend status")


class ErrorDetail(BaseModel):
    """Structured error detail information."""

    type: str = Field(..., description="Exception type name")
    code: str = Field(..., description="Error code (e.g., PW_VAL_003)")
    message: str = Field(..., description="Human-readable error message")


class ErrorResponse(BaseModel):
    """Response model for errors.

    Example:
        {"error": {"type": "EmptyConversationError", "code": "PW_VAL_003",
                   "message": "Messages are required"}}
    """

    error: ErrorDetail
