#!/usr/bin/env python3
"""
Tool handlers - one coroutine per exposed capability.

Every handler takes the shared :class:`~moorcheh_mcp.api.APIClient` and its
validated argument model, makes at most one auxiliary lookup plus one
primary API call, and returns the text shown to the assistant.

Failures never escape a handler. API, network and local precondition
errors are rendered as ordinary text with an operation-specific prefix
("Error searching: ...") so hosts display them inline in the conversation.
"""

from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Union

from .api import APIClient, MoorchehError
from .constants import (
    ALLOWED_UPLOAD_EXTENSIONS,
    DELETE_DOCUMENTS_SUBPATH,
    DOCUMENTS_SUBPATH,
    GET_DOCUMENTS_SUBPATH,
    MAX_UPLOAD_BYTES,
    UPLOAD_FILE_SUBPATH,
    VECTORS_SUBPATH,
)
from .models import (
    AnswerArgs,
    AnswerRequest,
    CreateNamespaceArgs,
    CreateNamespaceRequest,
    DeleteDataArgs,
    DeleteNamespaceArgs,
    GetDataArgs,
    ListNamespacesArgs,
    SearchArgs,
    SearchRequest,
    ToolArgs,
    UploadFileArgs,
    UploadTextArgs,
    UploadVectorsArgs,
)

logger = logging.getLogger(__name__)

Query = Union[str, list]


class FileValidationError(ValueError):
    """Raised when a file fails the local checks before upload."""
    pass


class QueryResolutionError(ValueError):
    """Raised when a string query cannot be read as a vector for a vector namespace."""
    pass


def _pretty(data: Any) -> str:
    return json.dumps(data, indent=2)


# =============================================================================
# Namespace Lookup
# =============================================================================

async def fetch_namespaces(client: APIClient) -> list[dict[str, Any]]:
    """Fetch all namespace descriptors in service order."""
    data = await client.request("GET", client.endpoints.namespaces)
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return data.get("namespaces") or []
    logger.warning(f"Unexpected namespace list payload ({type(data).__name__}), treating as empty")
    return []


async def find_namespace(client: APIClient, name: str) -> Optional[dict[str, Any]]:
    """Find one namespace's descriptor by name in the namespace list."""
    for ns in await fetch_namespaces(client):
        if ns.get("namespace_name") == name:
            return ns
    return None


def format_namespaces(namespaces: list[dict[str, Any]]) -> str:
    blocks = []
    for ns in namespaces:
        blocks.append("\n".join([
            f"Namespace: {ns.get('namespace_name')}",
            f"Type: {ns.get('type')}",
            f"Vector Dimension: {ns.get('vector_dimension') or 'N/A'}",
            f"Created: {ns.get('createdAt')}",
            f"Items: {ns.get('itemCount')}",
            "---",
        ]))
    return "Available namespaces:\n\n" + "\n".join(blocks)


# =============================================================================
# Namespace Tools
# =============================================================================

async def list_namespaces(client: APIClient, args: ListNamespacesArgs) -> str:
    try:
        namespaces = await fetch_namespaces(client)
    except MoorchehError as e:
        return f"Error listing namespaces: {e}"

    if not namespaces:
        return "No namespaces found"
    return format_namespaces(namespaces)


async def create_namespace(client: APIClient, args: CreateNamespaceArgs) -> str:
    body = CreateNamespaceRequest(
        namespace_name=args.namespace_name,
        type=args.type,
        vector_dimension=args.vector_dimension,
    )
    try:
        data = await client.request("POST", client.endpoints.namespaces, body.to_json())
    except MoorchehError as e:
        return f"Error creating namespace: {e}"

    logger.info(f"Created namespace {args.namespace_name!r} (type={args.type})")
    return f'Successfully created namespace "{args.namespace_name}":\n{_pretty(data)}'


async def delete_namespace(client: APIClient, args: DeleteNamespaceArgs) -> str:
    try:
        data = await client.request("DELETE", client.endpoints.namespace(args.namespace_name))
    except MoorchehError as e:
        return f"Error deleting namespace: {e}"

    logger.info(f"Deleted namespace {args.namespace_name!r}")
    return f'Successfully deleted namespace "{args.namespace_name}":\n{_pretty(data)}'


# =============================================================================
# Data Tools
# =============================================================================

async def upload_text(client: APIClient, args: UploadTextArgs) -> str:
    documents = [doc.model_dump(exclude_none=True) for doc in args.documents]
    url = client.endpoints.namespace(args.namespace_name, DOCUMENTS_SUBPATH)
    try:
        data = await client.request("POST", url, {"documents": documents})
    except MoorchehError as e:
        return f"Error uploading text documents: {e}"

    return (
        f'Successfully uploaded {len(documents)} document(s) to namespace '
        f'"{args.namespace_name}":\n{_pretty(data)}'
    )


async def upload_vectors(client: APIClient, args: UploadVectorsArgs) -> str:
    vectors = [vec.model_dump(exclude_none=True) for vec in args.vectors]
    url = client.endpoints.namespace(args.namespace_name, VECTORS_SUBPATH)
    try:
        data = await client.request("POST", url, {"vectors": vectors})
    except MoorchehError as e:
        return f"Error uploading vectors: {e}"

    return (
        f'Successfully uploaded {len(vectors)} vector(s) to namespace '
        f'"{args.namespace_name}":\n{_pretty(data)}'
    )


async def delete_data(client: APIClient, args: DeleteDataArgs) -> str:
    url = client.endpoints.namespace(args.namespace_name, DELETE_DOCUMENTS_SUBPATH)
    try:
        data = await client.request("POST", url, {"ids": args.ids})
    except MoorchehError as e:
        return f"Error deleting data: {e}"

    return (
        f'Successfully deleted {len(args.ids)} item(s) from namespace '
        f'"{args.namespace_name}":\n{_pretty(data)}'
    )


async def get_data(client: APIClient, args: GetDataArgs) -> str:
    url = client.endpoints.namespace(args.namespace_name, GET_DOCUMENTS_SUBPATH)
    try:
        data = await client.request("POST", url, {"ids": args.ids})
    except MoorchehError as e:
        return f"Error fetching data: {e}"

    return (
        f'Fetched {len(args.ids)} item(s) from namespace '
        f'"{args.namespace_name}":\n{_pretty(data)}'
    )


def check_upload_file(file_path: str) -> Path:
    """
    Check a file against the upload rules before any network call.

    Rules:
        - the path is an existing, readable regular file
        - size is at most MAX_UPLOAD_BYTES (a file exactly at the limit passes)
        - the extension (case-insensitive) is in ALLOWED_UPLOAD_EXTENSIONS

    Args:
        file_path: Path supplied by the caller (``~`` is expanded)

    Returns:
        Resolved path of the file

    Raises:
        FileValidationError: If any rule is violated
    """
    path = Path(file_path).expanduser()

    if not path.exists():
        raise FileValidationError(f"File not found: {file_path}")
    if not path.is_file():
        raise FileValidationError(f"Not a regular file: {file_path}")
    if not os.access(path, os.R_OK):
        raise FileValidationError(f"File is not readable: {file_path}")

    extension = path.suffix.lower()
    if extension not in ALLOWED_UPLOAD_EXTENSIONS:
        allowed = ", ".join(sorted(ALLOWED_UPLOAD_EXTENSIONS))
        raise FileValidationError(
            f"Unsupported file type '{extension or path.name}'. Allowed types: {allowed}"
        )

    size = path.stat().st_size
    if size > MAX_UPLOAD_BYTES:
        raise FileValidationError(
            f"File is too large ({size} bytes). Maximum size is "
            f"{MAX_UPLOAD_BYTES} bytes (10MB)"
        )

    return path.resolve()


async def upload_file(client: APIClient, args: UploadFileArgs) -> str:
    try:
        path = check_upload_file(args.file_path)
        url = client.endpoints.namespace(args.namespace_name, UPLOAD_FILE_SUBPATH)
        data = await client.upload_file(url, path)
    except (FileValidationError, MoorchehError) as e:
        return f"Error uploading file: {e}"

    file_name = data.get("fileName", path.name) if isinstance(data, dict) else path.name
    logger.info(f"Uploaded {path.name} to namespace {args.namespace_name!r}")
    return (
        f'Successfully uploaded file "{file_name}" to namespace '
        f'"{args.namespace_name}":\n{_pretty(data)}'
    )


# =============================================================================
# Search
# =============================================================================

def parse_vector_string(text: str) -> list[float]:
    """
    Parse a comma-separated list of numbers, e.g. "0.1, 0.2" or "[0.1,0.2]".

    Tokens that are not finite numbers are dropped, so the result may be
    shorter than the number of commas suggests (or empty).
    """
    stripped = text.strip()
    if stripped.startswith("[") and stripped.endswith("]"):
        stripped = stripped[1:-1]

    values = []
    for token in stripped.split(","):
        try:
            value = float(token.strip())
        except ValueError:
            continue
        if math.isfinite(value):
            values.append(value)
    return values


async def resolve_query(client: APIClient, namespaces: list[str], query: Query) -> Query:
    """
    Decide whether a query is sent as text or as a vector.

    Numeric arrays pass through untouched. A string is looked up against
    the first target namespace: for a vector namespace it is parsed into
    numbers and must match the namespace's dimension; otherwise it is a
    text query. If the lookup itself fails the string is sent as text and
    the service decides.

    Raises:
        QueryResolutionError: String query for a vector namespace that does
            not parse into a vector of the configured dimension
    """
    if not isinstance(query, str) or not namespaces:
        return query

    try:
        target = await find_namespace(client, namespaces[0])
    except MoorchehError as e:
        logger.warning(f"Namespace lookup for {namespaces[0]!r} failed, using text query: {e}")
        return query

    if not target or target.get("type") != "vector":
        return query

    dimension = target.get("vector_dimension")
    vector = parse_vector_string(query)
    if not vector or (dimension and len(vector) != dimension):
        raise QueryResolutionError(
            f"Error: Query string could not be parsed into a valid "
            f"{dimension or ''}-dimensional vector array. Please provide a "
            f"comma-separated list of numbers matching the namespace dimension."
        )
    return vector


def _query_label(query: Query) -> str:
    return query if isinstance(query, str) else json.dumps(query)


def format_search_results(
    query: Query,
    namespaces: list[str],
    data: dict[str, Any],
) -> str:
    results = data.get("results") or []
    blocks = []
    for i, result in enumerate(results, 1):
        content = result.get("content")
        if content is None:
            content = result.get("text")
        score = result.get("score")
        blocks.append("\n".join([
            f"Result {i}:",
            f"Content: {content}",
            f"Score: {'N/A' if score is None else score}",
            f"Metadata: {_pretty(result.get('metadata') or {})}",
            "---",
        ]))

    total = data.get("total") or len(results)
    return (
        f'Search results for "{_query_label(query)}" in namespaces '
        f'[{", ".join(namespaces)}]:\n\n' + "\n".join(blocks) +
        f"\n\nTotal results: {total}"
    )


async def search(client: APIClient, args: SearchArgs) -> str:
    try:
        resolved = await resolve_query(client, args.namespaces, args.query)
    except QueryResolutionError as e:
        return str(e)

    body = SearchRequest(
        namespaces=args.namespaces,
        query=resolved,
        top_k=args.top_k,
        kiosk_mode=args.kiosk_mode,
        threshold=args.threshold,
    )
    try:
        data = await client.request("POST", client.endpoints.search, body.to_json())
    except MoorchehError as e:
        return f"Error searching: {e}"

    if not isinstance(data, dict) or not data.get("results"):
        return f'No results found for query: "{_query_label(args.query)}"'
    return format_search_results(args.query, args.namespaces, data)


# =============================================================================
# Answer
# =============================================================================

async def answer(client: APIClient, args: AnswerArgs) -> str:
    body = AnswerRequest(
        namespace=args.namespace,
        query=args.query,
        top_k=args.top_k,
        type=args.type,
        kiosk_mode=args.kiosk_mode,
        temperature=args.temperature,
        threshold=args.threshold,
        ai_model=args.ai_model,
        chat_history=args.chat_history,
        header_prompt=args.header_prompt,
        footer_prompt=args.footer_prompt,
    )
    try:
        data = await client.request("POST", client.endpoints.answer, body.to_json())
    except MoorchehError as e:
        return f"Error getting AI answer: {e}"

    text = None
    if isinstance(data, dict):
        text = data.get("answer") or data.get("response")
    return f'AI Answer for "{args.query}" in namespace "{args.namespace}":\n\n{text or _pretty(data)}'


# =============================================================================
# Registry
# =============================================================================

@dataclass(frozen=True)
class ToolSpec:
    """An exposed tool: its name, description, argument model and handler."""
    name: str
    description: str
    args_model: type[ToolArgs]
    handler: Callable[[APIClient, Any], Awaitable[str]]


TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        "list-namespaces",
        "List all available namespaces in Moorcheh",
        ListNamespacesArgs,
        list_namespaces,
    ),
    ToolSpec(
        "create-namespace",
        "Create a new namespace for document storage in Moorcheh",
        CreateNamespaceArgs,
        create_namespace,
    ),
    ToolSpec(
        "delete-namespace",
        "Delete a namespace and all its contents from Moorcheh",
        DeleteNamespaceArgs,
        delete_namespace,
    ),
    ToolSpec(
        "upload-text",
        "Upload text documents to a namespace in Moorcheh",
        UploadTextArgs,
        upload_text,
    ),
    ToolSpec(
        "upload-vectors",
        "Upload vector data to a namespace in Moorcheh",
        UploadVectorsArgs,
        upload_vectors,
    ),
    ToolSpec(
        "delete-data",
        "Delete specific data items from a namespace in Moorcheh",
        DeleteDataArgs,
        delete_data,
    ),
    ToolSpec(
        "get-data",
        "Get specific data items by ID from a text namespace in Moorcheh",
        GetDataArgs,
        get_data,
    ),
    ToolSpec(
        "upload-file",
        (
            "Upload a file directly to a text-type namespace for processing and "
            "indexing. Files are queued for ingestion and will be available for "
            "search once processed. Supported file types: .pdf, .docx, .xlsx, "
            ".json, .txt, .csv, .md (max 10MB)"
        ),
        UploadFileArgs,
        upload_file,
    ),
    ToolSpec(
        "search",
        (
            "Search across namespaces with vector similarity in Moorcheh. "
            "Text queries are used as-is; for vector namespaces pass an array "
            "of numbers or a comma-separated list matching the namespace dimension."
        ),
        SearchArgs,
        search,
    ),
    ToolSpec(
        "answer",
        "Get AI-generated answers based on data in a namespace using Moorcheh",
        AnswerArgs,
        answer,
    ),
)

TOOLS_BY_NAME: dict[str, ToolSpec] = {tool.name: tool for tool in TOOLS}
