"""Draft SKILL.md documents for skill candidates using the Claude API."""

import os
import re
import sys
from typing import Optional

import anthropic

from .models import SkillCandidate

DEFAULT_MODEL = "claude-sonnet-4-20250514"

DRAFT_PROMPT = '''Write a Claude Code skill (SKILL.md) for a workflow that was observed repeatedly in real coding sessions.

Workflow: {name}
Category: {category}
Observed: {frequency} times
Summary: {description}

Steps as recorded (tool calls in order):
{steps}

{commands_section}{files_section}Trigger conditions:
{triggers}

Respond with the SKILL.md content only, in this exact shape:

---
name: {name}
description: One sentence saying when to use this skill
---

# Title

## When to use
- ...

## Steps
1. ...

RULES:
- Describe steps in terms of intent (what and why), not raw tool names.
- Keep example commands exactly as recorded. Do not invent commands or file paths.
- Keep it under 40 lines.'''


def build_draft_prompt(candidate: SkillCandidate) -> str:
    """Fill the draft prompt with a candidate's details."""
    steps = "\n".join(f"{step.order}. {step.tool_name}" for step in candidate.steps)
    triggers = "\n".join(f"- {t}" for t in candidate.trigger_conditions)

    commands_section = ""
    if candidate.related_commands:
        commands = "\n".join(f"- {c}" for c in candidate.related_commands)
        commands_section = f"Commands seen in this workflow:\n{commands}\n\n"

    files_section = ""
    if candidate.related_files:
        files = "\n".join(f"- {f}" for f in candidate.related_files)
        files_section = f"Files touched in this workflow:\n{files}\n\n"

    return DRAFT_PROMPT.format(
        name=candidate.name,
        category=candidate.category,
        frequency=candidate.expected_frequency,
        description=candidate.description,
        steps=steps,
        commands_section=commands_section,
        files_section=files_section,
        triggers=triggers
    )


def draft_skill(candidate: SkillCandidate, model: str = DEFAULT_MODEL) -> Optional[str]:
    """Use Claude API to draft a SKILL.md for a skill candidate.

    Args:
        candidate: Skill candidate to describe.
        model: Claude model to use.

    Returns:
        SKILL.md content, or None on error.

    Requires:
        ANTHROPIC_API_KEY environment variable.
    """
    api_key = os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        print("Error: ANTHROPIC_API_KEY environment variable not set", file=sys.stderr)
        return None

    client = anthropic.Anthropic(api_key=api_key)

    try:
        print(f"Drafting {candidate.name} with Claude...", file=sys.stderr)
        response = client.messages.create(
            model=model,
            max_tokens=2000,
            messages=[{"role": "user", "content": build_draft_prompt(candidate)}]
        )
    except anthropic.APIError as e:
        print(f"Error drafting {candidate.name}: {e}", file=sys.stderr)
        return None

    text = _response_text(response)
    if not text:
        print(f"Error drafting {candidate.name}: empty response", file=sys.stderr)
        return None

    return _extract_skill_document(text)


def _response_text(response) -> str:
    """Join the text blocks of a Messages API response."""
    return "".join(
        block.text for block in response.content
        if getattr(block, "type", "text") == "text" and isinstance(getattr(block, "text", None), str)
    )


def _extract_skill_document(response_text: str) -> Optional[str]:
    """Strip anything before the front matter and any surrounding code fence."""
    text = response_text.strip()
    text = re.sub(r"^```(?:markdown|md)?\s*\n", "", text)
    text = re.sub(r"\n```\s*$", "", text)

    start = text.find("---")
    if start == -1:
        return None
    return text[start:].rstrip() + "\n"
