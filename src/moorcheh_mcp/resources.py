#!/usr/bin/env python3
"""
MCP resources - live namespace views and static documentation.

Resources:
    moorcheh://namespaces                   JSON list of namespaces (live)
    moorcheh://namespace/{namespace_name}   JSON details of one namespace (live)
    moorcheh://docs/api                     API reference
    moorcheh://config/help                  configuration troubleshooting
    moorcheh://guides/...                   best-practice guides

Static documents are plain strings with no network access. The live
resources render API failures as ``{"error": ...}`` JSON instead of raising.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote

from .api import APIClient, MoorchehError
from .constants import API_KEY_ENV, DEFAULT_BASE_URL
from .tools import fetch_namespaces

logger = logging.getLogger(__name__)

JSON_MIME = "application/json"
MARKDOWN_MIME = "text/markdown"

NAMESPACES_URI = "moorcheh://namespaces"
NAMESPACE_URI_PREFIX = "moorcheh://namespace/"
NAMESPACE_URI_TEMPLATE = NAMESPACE_URI_PREFIX + "{namespace_name}"


@dataclass(frozen=True)
class ResourceSpec:
    uri: str
    name: str
    description: str
    mime_type: str


@dataclass(frozen=True)
class StaticResource(ResourceSpec):
    content: str = ""


# =============================================================================
# Static Documents
# =============================================================================

API_DOCS = f"""# Moorcheh API Documentation

## Base URL
`{DEFAULT_BASE_URL}`

## Authentication
All requests require an API key in the `x-api-key` header.

## Endpoints

### Namespaces
- **GET** `/namespaces` - List all namespaces
- **POST** `/namespaces` - Create new namespace
- **DELETE** `/namespaces/{{name}}` - Delete namespace
- **GET** `/namespaces/{{name}}` - Get namespace details

### Documents
- **POST** `/namespaces/{{name}}/documents` - Upload text documents
- **POST** `/namespaces/{{name}}/vectors` - Upload vector data
- **POST** `/namespaces/{{name}}/documents/delete` - Delete specific documents
- **POST** `/namespaces/{{name}}/documents/get` - Get documents by ID
- **POST** `/namespaces/{{name}}/upload-file` - Upload a file (multipart, max 10MB)

### Search & AI
- **POST** `/search` - Search across namespaces
- **POST** `/answer` - Get AI-generated answers

## Rate Limits
API requests are subject to rate limiting based on your subscription tier.
"""

CONFIG_HELP = f"""# Moorcheh Configuration Help

## Environment Variables Required

Set your key in the environment, or create a `.env` file in the directory
the server is started from:

```
{API_KEY_ENV}=your_moorcheh_api_key
```

Optional settings:

- `MOORCHEH_ENV_FILE` - path of the env file (default: `.env`)
- `MOORCHEH_LOG_LEVEL` - DEBUG, INFO, WARNING, ERROR (default: INFO)
- `MOORCHEH_LOG_FORMAT` - `text` or `json` (default: text)

## Troubleshooting

### Common Issues

1. **403 Forbidden Error**
   - Check your API key is correct
   - Ensure your API key has proper permissions

2. **401 Unauthorized Error**
   - Your API key may be invalid or expired
   - Contact support to regenerate your key

3. **Network Errors**
   - Check your internet connection
   - Verify the API endpoint is correct

4. **Server exits at startup**
   - `{API_KEY_ENV}` is missing or still set to a placeholder value

### Getting Help

For additional support, check:
- Moorcheh documentation
- API status page
- Contact support with your error details
"""

NAMESPACE_CREATION_GUIDE = """# Moorcheh Namespace Creation Guide

## Step-by-step process:

1. **Choose a descriptive name** for your namespace
   - Use lowercase letters, numbers, and hyphens
   - Make it descriptive of your content
   - Example: "customer-docs", "product-vectors", "help-articles"

2. **Determine the namespace type:**
   - **Text namespace** for storing and searching text documents
     - Ideal for documentation, articles, customer support content
     - Full-text search capabilities included
   - **Vector namespace** for semantic search and AI applications
     - You'll need to specify vector dimensions (commonly 384, 768, or 1536)
     - Compatible with embeddings from OpenAI, Sentence Transformers, etc.

3. **Use the create-namespace tool:**
   ```
   namespace_name: your-chosen-name
   type: text  # or vector
   vector_dimension: 384  # only for vector namespaces
   ```

## Best Practices:
- Start with a small test namespace to familiarize yourself
- Plan your document structure and metadata beforehand
- Consider how you'll organize and tag your content
- Test search functionality with sample data

## Next Steps:
After creating your namespace, you can:
- Upload documents using the upload-text tool
- Upload files using the upload-file tool (text namespaces)
- Upload vector embeddings using upload-vectors tool (for vector namespaces)
- Search your content using the search tool
- Get AI-powered answers using the answer tool
"""

SEARCH_OPTIMIZATION_GUIDE = """# Moorcheh Search Optimization Guide

## General Search Strategy

### Text Search Best Practices:
- Use specific, descriptive terms rather than generic ones
- Include key domain terminology from your content field
- Try both short keywords and longer phrases
- Use synonyms if initial searches don't return good results

### Query Examples:
- Instead of: "help"
- Try: "troubleshooting guide", "how to resolve", "step by step"

### Vector Search Best Practices:
- Ensure your query embeddings use the same model as your stored vectors
- Vector search works well with semantic similarity
- Pass the query as an array of numbers, or a comma-separated list
  matching the namespace dimension

## Parameter Tuning:

1. **top_k**: Number of results to return
   - Start with 5-10 for most use cases
   - Increase for broader exploration
   - Decrease for highly targeted results

2. **threshold**: Similarity threshold (0-1)
   - 0.7-0.8: High similarity, fewer but more relevant results
   - 0.5-0.7: Moderate similarity, balanced results
   - 0.3-0.5: Lower similarity, more comprehensive results

## Troubleshooting:
- If no results: Lower threshold, check spelling, try synonyms
- If too many irrelevant results: Raise threshold, use more specific terms
- If results seem random: Check your embeddings model compatibility
"""

DATA_ORGANIZATION_GUIDE = """# Moorcheh Data Organization Guide

## Namespace Strategy

### Large Team Considerations:
- Create separate namespaces by department or project
- Use consistent naming conventions across teams
- Implement clear metadata standards
- Consider access control and permissions

### Small Team Approach:
- Fewer namespaces with more content per namespace
- Flexible organization that can evolve
- Focus on clear naming and good metadata
- Regular cleanup and maintenance

## Content Organization

1. **Metadata Schema:**
   ```json
   {
     "category": "primary classification",
     "tags": ["tag1", "tag2", "tag3"],
     "author": "content creator",
     "created_date": "2024-01-01",
     "status": "draft/review/published"
   }
   ```

2. **Document ID Conventions:**
   - Use descriptive, hierarchical IDs
   - Include date/version when relevant
   - Examples: "support-faq-login-2024", "product-spec-v2-auth"

3. **Content Chunking:**
   - Break large documents into logical sections
   - Each chunk should be self-contained
   - Include context in metadata

## Maintenance Workflow
- Monthly metadata cleanup; remove outdated content
- Validate metadata completeness before upload
- Consider splitting namespaces as they grow
"""

AI_ANSWER_SETUP_GUIDE = """# Moorcheh AI Answer Configuration Guide

## Header Prompt Configuration

```
You are an AI assistant specialized in your domain.
Your role is to provide balanced answers based on the provided context.
```

## Footer Prompt Configuration

```
Additional Guidelines:
- Always cite specific sources when possible
- If information is incomplete, acknowledge limitations
- Provide practical next steps
```

## Parameter Recommendations

1. **temperature**: 0.5-0.7 (balanced), allowed range 0-2
2. **top_k**: 3-5 for focused answers, 5-8 for comprehensive responses
3. **threshold**: 0.7+ for high confidence, 0.5-0.7 for broader context

## Chat History Usage

Pass earlier turns as `chatHistory` (oldest first) to keep the conversation
flowing and avoid repeating information.

## Example Usage

```json
{
  "namespace": "your-namespace",
  "query": "How do I configure authentication?",
  "headerPrompt": "You are a technical assistant...",
  "footerPrompt": "Always include code examples...",
  "temperature": 0.5,
  "top_k": 5,
  "chatHistory": [
    {"role": "user", "content": "Previous question..."},
    {"role": "assistant", "content": "Previous answer..."}
  ]
}
```
"""

STATIC_RESOURCES: tuple[StaticResource, ...] = (
    StaticResource(
        "moorcheh://docs/api", "api-docs",
        "Moorcheh API documentation and endpoints", MARKDOWN_MIME, API_DOCS,
    ),
    StaticResource(
        "moorcheh://config/help", "config-help",
        "Configuration help and troubleshooting guide", MARKDOWN_MIME, CONFIG_HELP,
    ),
    StaticResource(
        "moorcheh://guides/namespace-creation", "namespace-creation-guide",
        "Step-by-step guide for creating a new Moorcheh namespace, with best practices",
        MARKDOWN_MIME, NAMESPACE_CREATION_GUIDE,
    ),
    StaticResource(
        "moorcheh://guides/search-optimization", "search-optimization-guide",
        "Tips for optimizing search queries in Moorcheh",
        MARKDOWN_MIME, SEARCH_OPTIMIZATION_GUIDE,
    ),
    StaticResource(
        "moorcheh://guides/data-organization", "data-organization-guide",
        "Best practices for organizing data in Moorcheh namespaces",
        MARKDOWN_MIME, DATA_ORGANIZATION_GUIDE,
    ),
    StaticResource(
        "moorcheh://guides/ai-answer-setup", "ai-answer-setup-guide",
        "Guide for configuring AI-powered answers in Moorcheh",
        MARKDOWN_MIME, AI_ANSWER_SETUP_GUIDE,
    ),
)

STATIC_BY_URI: dict[str, StaticResource] = {r.uri: r for r in STATIC_RESOURCES}

NAMESPACES_RESOURCE = ResourceSpec(
    NAMESPACES_URI, "namespaces", "List of all Moorcheh namespaces", JSON_MIME,
)

NAMESPACE_TEMPLATE = ResourceSpec(
    NAMESPACE_URI_TEMPLATE, "namespace-details",
    "Details of a specific Moorcheh namespace", JSON_MIME,
)


# =============================================================================
# Live Resources
# =============================================================================

def namespace_name_from_uri(uri: str) -> Optional[str]:
    """Extract the name from moorcheh://namespace/{name}, or None."""
    if not uri.startswith(NAMESPACE_URI_PREFIX):
        return None
    name = unquote(uri[len(NAMESPACE_URI_PREFIX):].strip("/"))
    return name or None


async def read_namespaces(client: APIClient) -> str:
    try:
        namespaces = await fetch_namespaces(client)
    except MoorchehError as e:
        return json.dumps({"error": str(e)}, indent=2)
    return json.dumps({"namespaces": namespaces}, indent=2)


async def read_namespace(client: APIClient, name: str) -> str:
    try:
        data = await client.request("GET", client.endpoints.namespace(name))
    except MoorchehError as e:
        return json.dumps({"error": str(e)}, indent=2)
    return json.dumps(data, indent=2)


async def read_resource(client: APIClient, uri: str) -> tuple[str, str]:
    """
    Read any resource by URI.

    Returns:
        (content, mime_type)

    Raises:
        ValueError: Unknown resource URI
    """
    uri = uri.rstrip("/")
    if uri in STATIC_BY_URI:
        resource = STATIC_BY_URI[uri]
        return resource.content, resource.mime_type
    if uri == NAMESPACES_URI:
        return await read_namespaces(client), JSON_MIME

    name = namespace_name_from_uri(uri)
    if name:
        return await read_namespace(client, name), JSON_MIME

    raise ValueError(f"Unknown resource: {uri}")
