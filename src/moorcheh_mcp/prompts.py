#!/usr/bin/env python3
"""
MCP prompts - guides interpolated from optional arguments.

Prompts:
    search-optimization  search_type (text|vector), domain
    data-organization    content_type, team_size (small|large)
    ai-answer-setup      answer_style (concise|detailed|technical|friendly|balanced),
                         context_type

Rendering is a pure function of the arguments; nothing touches the network.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .constants import DEFAULT_BASE_URL


@dataclass(frozen=True)
class PromptArgumentSpec:
    name: str
    description: str
    choices: Optional[tuple[str, ...]] = None
    default: str = ""


@dataclass(frozen=True)
class PromptSpec:
    name: str
    description: str
    arguments: tuple[PromptArgumentSpec, ...]
    render: Callable[[dict[str, str]], str]


def resolve_arguments(spec: PromptSpec, arguments: Optional[dict[str, str]]) -> dict[str, str]:
    """
    Apply defaults and check enumerated arguments.

    Raises:
        ValueError: An argument has a value outside its choices
    """
    arguments = arguments or {}
    resolved = {}
    for arg in spec.arguments:
        value = arguments.get(arg.name) or arg.default
        if arg.choices and value not in arg.choices:
            raise ValueError(
                f"Invalid value for '{arg.name}': {value!r}. "
                f"Expected one of: {', '.join(arg.choices)}"
            )
        resolved[arg.name] = value
    return resolved


# =============================================================================
# search-optimization
# =============================================================================

_TEXT_SEARCH_TIPS = """**Text Search Best Practices:**
- Use specific, descriptive terms rather than generic ones
- Include key domain terminology from your {domain} field
- Try both short keywords and longer phrases
- Use synonyms if initial searches don't return good results

**Query Examples:**
- Instead of: "help"
- Try: "troubleshooting guide", "how to resolve", "step by step"
- Use complete sentences: "How do I configure authentication?"
"""

_VECTOR_SEARCH_TIPS = """**Vector Search Best Practices:**
- Ensure your query embeddings use the same model as your stored vectors
- Match vector dimensions with your namespace configuration
- Pass the vector as an array of numbers, or as a comma-separated string
  such as "0.1, 0.2, 0.3" (it is converted when the namespace is a vector
  namespace)
"""


def render_search_optimization(args: dict[str, str]) -> str:
    search_type = args["search_type"]
    domain = args["domain"]
    tips = _TEXT_SEARCH_TIPS if search_type == "text" else _VECTOR_SEARCH_TIPS

    return f"""# Moorcheh Search Optimization Guide

## Optimizing {search_type} search for {domain} content

### Request Format Examples:

**Text Search Request:**
```json
{{
  "query": "your search text here",
  "namespaces": ["your-namespace"],
  "top_k": 10,
  "kiosk_mode": false
}}
```

**Vector Search Request:**
```json
{{
  "query": [0.1, 0.2, 0.3],
  "namespaces": ["vector-embeddings"],
  "top_k": 5,
  "kiosk_mode": true,
  "threshold": 0.1
}}
```

**cURL Example:**
```bash
curl -X POST "{DEFAULT_BASE_URL}/search" \\
  -H "Content-Type: application/json" \\
  -H "x-api-key: your-api-key-here" \\
  -d '{{"query": "your search text", "namespaces": ["your-namespace"], "top_k": 5}}'
```

### Search Strategy:

{tips.format(domain=domain)}
### Parameter Tuning:

1. **top_k**: Number of results to return (default: 10)
2. **threshold**: Similarity threshold (0-1, optional)
   - 0.7-0.8: High similarity, fewer but more relevant results
   - 0.5-0.7: Moderate similarity, balanced results
   - 0.3-0.5: Lower similarity, more comprehensive results
3. **kiosk_mode**: Boolean (default: false)
   - true: Restrict search to specific namespace(s) with threshold filtering
   - Pair kiosk_mode=true with an explicit threshold

### Domain-Specific Tips for {domain}:
- Use terminology specific to {domain}
- Test with actual user queries from your {domain} context
- Monitor search performance and adjust parameters accordingly

### Troubleshooting:
- If no results: Lower threshold, check spelling, try synonyms
- If too many irrelevant results: Raise threshold, use more specific terms
- For vector search: Verify vector dimensions match namespace configuration
"""


# =============================================================================
# data-organization
# =============================================================================

_LARGE_TEAM = """**Large Team Considerations:**
- Create separate namespaces by department or project
- Use consistent naming conventions across teams
- Implement clear metadata standards
- Consider access control and permissions
"""

_SMALL_TEAM = """**Small Team Approach:**
- Fewer namespaces with more content per namespace
- Flexible organization that can evolve
- Focus on clear naming and good metadata
- Regular cleanup and maintenance
"""


def render_data_organization(args: dict[str, str]) -> str:
    content_type = args["content_type"]
    team_size = args["team_size"]
    strategy = _LARGE_TEAM if team_size == "large" else _SMALL_TEAM

    return f"""# Moorcheh Data Organization Guide

## Organizing {content_type} for a {team_size} team

### Namespace Strategy:

{strategy}
### Content Organization for {content_type}:

1. **Metadata Schema:**
   ```json
   {{
     "category": "primary classification",
     "tags": ["tag1", "tag2"],
     "author": "content creator",
     "created_date": "2024-01-01",
     "status": "draft/review/published"
   }}
   ```

2. **Document ID Conventions:**
   - Use descriptive, hierarchical IDs
   - Examples: "support-faq-login-2024", "product-spec-v2-auth"

3. **Content Chunking:**
   - Break large documents into logical, self-contained sections
   - Include context in metadata

### Search-Friendly Organization:
- Use consistent terminology in your {content_type}
- Include alternative phrasings in metadata
- Tag content with multiple relevant categories

This organization will help your {team_size} team efficiently manage and search through your {content_type}.
"""


# =============================================================================
# ai-answer-setup
# =============================================================================

_STYLE_GUIDELINES = {
    "concise": (
        "- Keep answers brief and to the point\n"
        "- Use bullet points for multiple items\n"
        "- Focus on actionable information"
    ),
    "detailed": (
        "- Provide comprehensive explanations\n"
        "- Include relevant background information\n"
        "- Structure answers with clear sections"
    ),
    "technical": (
        "- Use precise technical terminology\n"
        "- Include code examples when relevant\n"
        "- Explain complex concepts step-by-step"
    ),
    "friendly": (
        "- Use conversational, approachable language\n"
        "- Explain concepts in simple terms\n"
        "- Ask clarifying questions when needed"
    ),
    "balanced": (
        "- Balance brevity with completeness\n"
        "- Use clear, professional language\n"
        "- Structure information logically"
    ),
}

_STYLE_TEMPERATURE = {
    "technical": "0.3-0.5 (more precise, less creative)",
    "friendly": "0.7-0.9 (more conversational)",
}


def render_ai_answer_setup(args: dict[str, str]) -> str:
    style = args["answer_style"]
    context = args["context_type"]
    next_step = (
        "Include relevant code snippets or examples"
        if context == "technical" else "Provide practical next steps"
    )

    return f"""# Moorcheh AI Answer Configuration Guide

## Setting up {style} AI answers for {context} content

### Header Prompt Configuration:

```
You are an AI assistant specialized in {context}.
Your role is to provide {style} answers based on the provided context.

Style Guidelines:
{_STYLE_GUIDELINES[style]}
```

### Footer Prompt Configuration:

```
Additional Guidelines:
- Always cite specific sources when possible
- If information is incomplete, acknowledge limitations
- {next_step}
```

### Parameter Recommendations:

1. **temperature**: {_STYLE_TEMPERATURE.get(style, "0.5-0.7 (balanced)")}
2. **top_k**: 3-5 for focused answers, 5-8 for comprehensive responses
3. **threshold**: 0.7+ for high confidence, 0.5-0.7 for broader context

### Example Usage:

```json
{{
  "namespace": "your-namespace",
  "query": "How do I configure authentication?",
  "headerPrompt": "You are a {style} assistant for {context}...",
  "temperature": 0.5,
  "top_k": 5,
  "chatHistory": [
    {{"role": "user", "content": "Previous question..."}},
    {{"role": "assistant", "content": "Previous answer..."}}
  ]
}}
```

This configuration will provide {style} answers tailored to your {context} use case.
"""


PROMPTS: tuple[PromptSpec, ...] = (
    PromptSpec(
        "search-optimization",
        "Tips for optimizing search queries in Moorcheh",
        (
            PromptArgumentSpec("search_type", "Type of search (text or vector)",
                               ("text", "vector"), "text"),
            PromptArgumentSpec("domain", "Domain or topic area of your content",
                               default="general"),
        ),
        render_search_optimization,
    ),
    PromptSpec(
        "data-organization",
        "Best practices for organizing data in Moorcheh namespaces",
        (
            PromptArgumentSpec("content_type", "Type of content you're organizing",
                               default="documents"),
            PromptArgumentSpec("team_size", "Size of your team using this data",
                               ("small", "large"), "small"),
        ),
        render_data_organization,
    ),
    PromptSpec(
        "ai-answer-setup",
        "Guide for configuring AI-powered answers in Moorcheh",
        (
            PromptArgumentSpec("answer_style", "Desired style for AI answers",
                               tuple(_STYLE_GUIDELINES), "balanced"),
            PromptArgumentSpec("context_type", "Type of context/domain for answers",
                               default="general"),
        ),
        render_ai_answer_setup,
    ),
)

PROMPTS_BY_NAME: dict[str, PromptSpec] = {p.name: p for p in PROMPTS}


def render_prompt(name: str, arguments: Optional[dict[str, str]] = None) -> str:
    """
    Render a prompt by name.

    Raises:
        ValueError: Unknown prompt or invalid argument value
    """
    spec = PROMPTS_BY_NAME.get(name)
    if spec is None:
        raise ValueError(f"Unknown prompt: {name}")
    return spec.render(resolve_arguments(spec, arguments))
