"""
DevHub AI Prompts

Persona for the portfolio chat assistant and the instructions used when
turning raw repository metadata into portfolio drafts.
"""

import json
from typing import Iterable, List

from devhub.libs.models import GitHubRepo, Project, STORED_CATEGORIES


def format_catalog_summary(projects: Iterable[Project]) -> str:
    """One line per project: ``- title (category): tag, tag``"""
    return "\n".join(
        f"- {p.title} ({p.category.value}): {', '.join(p.tags)}"
        for p in projects
    )


def get_chat_system_prompt(projects: List[Project]) -> str:
    """Generate the system instruction for the portfolio chat assistant.

    Args:
        projects: Current catalog, embedded so the assistant can answer
            catalog questions without a separate lookup

    Returns:
        Complete system prompt string
    """
    categories = sorted({p.category.value for p in projects})
    return f'''
You are the "DevHub Intelligence", a senior-level AI assistant for this portfolio.

CONTEXT:
This portfolio showcases {len(projects)} professional frontend projects built with React, TypeScript, and modern stacks.

PROJECT DATA SUMMARY:
{format_catalog_summary(projects)}

BEHAVIOR:
1. Be technically precise and concise.
2. If a user asks for "React projects", suggest 3 specific ones from the list.
3. If asked about experience, mention that the developer has {len(projects)} projects spanning {", ".join(categories) or "several areas"}.
4. Always maintain a dark-mode, tech-focused personality.
5. Max response length: 120 words.
'''.strip()


def get_structuring_prompt(repos: List[GitHubRepo]) -> str:
    """Prompt for the one-shot repository structuring call."""
    payload = [
        {
            "name": r.name,
            "description": r.description,
            "language": r.language,
            "topics": r.topics,
            "homepage": r.homepage,
            "html_url": r.html_url,
        }
        for r in repos
    ]
    category_list = ", ".join(c.value for c in STORED_CATEGORIES)
    return f'''
Turn each GitHub repository below into one portfolio project entry.

Rules:
- Return exactly one project per repository, in the same order.
- "title" must be the repository name, unchanged.
- "description" is one or two polished sentences written for a portfolio visitor.
- "category" must be one of: {category_list}.
- "tags" lists the main technologies (language, frameworks, topics), no duplicates.
- "repo_url" is the repository html_url; "demo_url" is the homepage or null.

Repositories:
{json.dumps(payload, indent=2)}
'''.strip()


STRUCTURING_SYSTEM_PROMPT = (
    "You are a technical writer curating a developer portfolio. "
    "Respond only with JSON matching the provided schema."
)


def get_project_draft_schema() -> dict:
    """Strict JSON schema for the structuring response."""
    return {
        "name": "portfolio_projects",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "projects": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "title": {"type": "string"},
                            "description": {"type": "string"},
                            "category": {
                                "type": "string",
                                "enum": [c.value for c in STORED_CATEGORIES],
                            },
                            "tags": {"type": "array", "items": {"type": "string"}},
                            "repo_url": {"type": ["string", "null"]},
                            "demo_url": {"type": ["string", "null"]},
                        },
                        "required": ["title", "description", "category", "tags", "repo_url", "demo_url"],
                        "additionalProperties": False,
                    },
                },
            },
            "required": ["projects"],
            "additionalProperties": False,
        },
    }
