#!/usr/bin/env python3
"""
Tool argument models and outbound request bodies.

Each tool declares its arguments as a pydantic model; the same model
produces the tool's advertised ``inputSchema`` and validates incoming
calls through :func:`validate_arguments`.

Request bodies sent to the API leave optional fields as ``None`` and are
serialized with ``exclude_none``, so an argument the caller did not supply
never appears in the body at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import (
    DEFAULT_ANSWER_TOP_K,
    DEFAULT_NAMESPACE_TYPE,
    DEFAULT_SEARCH_TOP_K,
    DEFAULT_TEMPERATURE,
    MAX_TEMPERATURE,
)

Number = Union[int, float]
NamespaceType = Literal["text", "vector"]

T = TypeVar("T", bound=BaseModel)


class ToolArgs(BaseModel):
    """Base for tool arguments; unknown keys are ignored."""
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Namespace Tools
# =============================================================================

class ListNamespacesArgs(ToolArgs):
    pass


class CreateNamespaceArgs(ToolArgs):
    namespace_name: str = Field(min_length=1, description="Name of the namespace to create")
    type: NamespaceType = Field(
        DEFAULT_NAMESPACE_TYPE,
        description="Type of namespace: 'text' or 'vector' (default: text)",
    )
    vector_dimension: Optional[int] = Field(
        None, ge=1, description="Vector dimension, required for vector namespaces"
    )


class DeleteNamespaceArgs(ToolArgs):
    namespace_name: str = Field(min_length=1, description="Name of the namespace to delete")


# =============================================================================
# Data Tools
# =============================================================================

class Document(BaseModel):
    id: str = Field(min_length=1, description="Unique identifier for the document")
    text: str = Field(description="Text content of the document")
    metadata: Optional[dict[str, Any]] = Field(
        None, description="Optional metadata for the document"
    )


class VectorRecord(BaseModel):
    id: str = Field(min_length=1, description="Unique identifier for the vector")
    vector: list[Number] = Field(min_length=1, description="Vector values")
    metadata: Optional[dict[str, Any]] = Field(
        None, description="Optional metadata for the vector"
    )


class UploadTextArgs(ToolArgs):
    namespace_name: str = Field(min_length=1, description="Name of the namespace to upload to")
    documents: list[Document] = Field(min_length=1, description="Array of documents to upload")


class UploadVectorsArgs(ToolArgs):
    namespace_name: str = Field(min_length=1, description="Name of the namespace to upload to")
    vectors: list[VectorRecord] = Field(min_length=1, description="Array of vectors to upload")


class DeleteDataArgs(ToolArgs):
    namespace_name: str = Field(min_length=1, description="Name of the namespace to delete from")
    ids: list[str] = Field(min_length=1, description="Array of document/vector IDs to delete")


class GetDataArgs(ToolArgs):
    namespace_name: str = Field(min_length=1, description="Name of the text namespace to read from")
    ids: list[str] = Field(min_length=1, description="Array of document IDs to retrieve")


class UploadFileArgs(ToolArgs):
    namespace_name: str = Field(
        min_length=1, description="Name of the text namespace to upload the file to"
    )
    file_path: str = Field(
        min_length=1,
        description=(
            "Path to the file to upload (max 10MB). "
            "Must be one of: .pdf, .docx, .xlsx, .json, .txt, .csv, .md"
        ),
    )


# =============================================================================
# Search & Answer Tools
# =============================================================================

class SearchArgs(ToolArgs):
    namespaces: list[str] = Field(
        min_length=1, description="Array of namespace names to search in"
    )
    query: Union[str, list[Number]] = Field(
        description=(
            "Search query - a text string, or a vector array of numbers "
            "eg [1,2,3] (do not quote the array)"
        )
    )
    top_k: int = Field(
        DEFAULT_SEARCH_TOP_K, ge=1,
        description=f"Number of top results to return (default: {DEFAULT_SEARCH_TOP_K})",
    )
    threshold: Optional[float] = Field(
        None, ge=0, le=1, description="Similarity threshold for results (0-1)"
    )
    kiosk_mode: bool = Field(False, description="Enable kiosk mode for public access")


class ChatMessage(BaseModel):
    role: str
    content: str


class AnswerArgs(ToolArgs):
    namespace: str = Field(min_length=1, description="Name of the namespace to search in")
    query: str = Field(min_length=1, description="Question or query to get an answer for")
    top_k: int = Field(
        DEFAULT_ANSWER_TOP_K, ge=1,
        description=f"Number of top results to use for context (default: {DEFAULT_ANSWER_TOP_K})",
    )
    threshold: Optional[float] = Field(
        None, ge=0, le=1, description="Similarity threshold for results (0-1)"
    )
    type: NamespaceType = Field(
        DEFAULT_NAMESPACE_TYPE, description="Type of search to perform (default: text)"
    )
    kiosk_mode: bool = Field(False, description="Enable kiosk mode for public access")
    ai_model: Optional[str] = Field(
        None, alias="aiModel", description="AI model to use for generating answers"
    )
    chat_history: Optional[list[ChatMessage]] = Field(
        None, alias="chatHistory", description="Previous chat messages for context"
    )
    header_prompt: Optional[str] = Field(
        None, alias="headerPrompt", description="Custom header prompt for the AI"
    )
    footer_prompt: Optional[str] = Field(
        None, alias="footerPrompt", description="Custom footer prompt for the AI"
    )
    temperature: float = Field(
        DEFAULT_TEMPERATURE, ge=0, le=MAX_TEMPERATURE,
        description="Temperature for AI response generation (0-2, default: 0.7)",
    )


# =============================================================================
# Request Bodies
# =============================================================================

class RequestBody(BaseModel):
    """Outbound body; ``None`` fields are dropped on serialization."""
    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class CreateNamespaceRequest(RequestBody):
    namespace_name: str
    type: str
    vector_dimension: Optional[int] = None


class SearchRequest(RequestBody):
    namespaces: list[str]
    query: Union[str, list[Number]]
    top_k: int
    kiosk_mode: bool
    threshold: Optional[float] = None


class AnswerRequest(RequestBody):
    namespace: str
    query: str
    top_k: int
    type: str
    kiosk_mode: bool
    temperature: float
    threshold: Optional[float] = None
    ai_model: Optional[str] = Field(None, alias="aiModel")
    chat_history: Optional[list[ChatMessage]] = Field(None, alias="chatHistory")
    header_prompt: Optional[str] = Field(None, alias="headerPrompt")
    footer_prompt: Optional[str] = Field(None, alias="footerPrompt")

    @field_validator("chat_history")
    @classmethod
    def _empty_history_is_absent(cls, value: Optional[list[ChatMessage]]) -> Optional[list[ChatMessage]]:
        return value or None

    @field_validator("ai_model", "header_prompt", "footer_prompt")
    @classmethod
    def _empty_string_is_absent(cls, value: Optional[str]) -> Optional[str]:
        return value or None


# =============================================================================
# Validation
# =============================================================================

@dataclass(frozen=True)
class Validated(Generic[T]):
    """Outcome of validating tool arguments: either ``value`` or ``error``."""
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "arguments"
        parts.append(f"{loc}: {err['msg']}")
    return "Invalid arguments: " + "; ".join(parts)


def validate_arguments(model: type[T], arguments: Optional[dict[str, Any]]) -> Validated[T]:
    """
    Validate raw tool arguments against a model.

    Args:
        model: ToolArgs subclass declaring the tool's arguments
        arguments: Arguments as received from the client (may be None)

    Returns:
        Validated with the parsed model on success, or a readable error
    """
    try:
        return Validated(value=model.model_validate(arguments or {}))
    except ValidationError as e:
        return Validated(error=_format_validation_error(e))


def input_schema(model: type[BaseModel]) -> dict[str, Any]:
    """JSON schema advertised for a tool."""
    schema = model.model_json_schema(by_alias=True)
    schema.setdefault("properties", {})
    return schema
