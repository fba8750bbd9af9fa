"""
Moorcheh MCP Server - Moorcheh search and AI answers for MCP hosts.

This package adapts the Moorcheh HTTP API (namespaces, document and vector
upload, semantic search, retrieval-augmented answers) to the Model Context
Protocol over stdio.

Architecture:
    - One validated Config (API key from environment or .env file)
    - One async HTTP client shared by all handlers
    - Failures rendered as text content, never as protocol errors

Modules:
    server: MCP server, logging setup and command-line entry point
    tools: Tool handlers and the tool registry
    resources: Live namespace resources and static documentation
    prompts: Argument-driven guidance prompts
    models: Tool argument models and request bodies
    api: Endpoint registry, HTTP client and error classification
    config: Centralized configuration management
    constants: Project-wide constants

Usage:
    # Run MCP server
    python -m moorcheh_mcp.server

    # Or via entry point after install
    moorcheh-mcp
"""

__version__ = "1.0.0"

from .api import APIClient, Endpoints
from .config import Config, get_config
from .server import MoorchehServer

__all__ = ["APIClient", "Endpoints", "MoorchehServer", "get_config", "Config", "__version__"]
