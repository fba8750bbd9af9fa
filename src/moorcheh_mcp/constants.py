#!/usr/bin/env python3
"""
Project constants.

Central location for the Moorcheh API layout, upload limits and tool
defaults. All modules should read these values from here rather than
repeating literals.
"""

from __future__ import annotations

# =============================================================================
# Service
# =============================================================================

SERVER_NAME = "Moorcheh"

DEFAULT_BASE_URL = "https://api.moorcheh.ai/v1"

# Resource paths relative to the base URL
NAMESPACES_PATH = "/namespaces"
SEARCH_PATH = "/search"
ANSWER_PATH = "/answer"

# Sub-paths appended to /namespaces/{name}
DOCUMENTS_SUBPATH = "documents"
VECTORS_SUBPATH = "vectors"
DELETE_DOCUMENTS_SUBPATH = "documents/delete"
GET_DOCUMENTS_SUBPATH = "documents/get"
UPLOAD_FILE_SUBPATH = "upload-file"

ALLOWED_METHODS = frozenset({"GET", "POST", "DELETE"})

# =============================================================================
# Credentials
# =============================================================================

API_KEY_ENV = "MOORCHEH_API_KEY"

# Values shipped in sample .env files; never valid credentials
PLACEHOLDER_API_KEYS = frozenset({
    "your_api_key_here",
    "your_moorcheh_api_key",
    "your-api-key-here",
})

MIN_API_KEY_LENGTH = 10

# =============================================================================
# File Upload
# =============================================================================

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB

ALLOWED_UPLOAD_EXTENSIONS = frozenset({
    ".pdf",
    ".docx",
    ".xlsx",
    ".json",
    ".txt",
    ".csv",
    ".md",
})

# =============================================================================
# Tool Defaults
# =============================================================================

NAMESPACE_TYPES = ("text", "vector")

DEFAULT_NAMESPACE_TYPE = "text"
DEFAULT_SEARCH_TOP_K = 10
DEFAULT_ANSWER_TOP_K = 5
DEFAULT_TEMPERATURE = 0.7
MAX_TEMPERATURE = 2.0
