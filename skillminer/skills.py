"""Turn recurring tool patterns into skill candidates."""

import re
from functools import reduce

from .models import OperationPattern, SkillCandidate, SkillStep

SKILL_CATEGORIES = ("tdd", "refactoring", "debugging", "build", "git", "lint", "test", "docs", "other")

# Frequency a pattern needs before it is worth a skill
MEANINGFUL_MIN_FREQUENCY = 2
FALLBACK_MIN_FREQUENCY = 10

# Edits in one pattern that make it a refactoring
REFACTORING_MIN_EDITS = 3

SECONDS_PER_STEP = 5

TEST_KEYWORDS = ["test", "vitest", "jest", "pytest", "cargo test"]
LINT_KEYWORDS = ["lint", "biome check"]
GIT_KEYWORDS = ["git ", "gh "]
BUILD_KEYWORDS = ["build", "tsc"]

# Dominant shell-command category -> skill category
BASH_CATEGORY_MAP = {
    "test": "test",
    "lint": "lint",
    "format": "lint",
    "build": "build",
    "typecheck": "build",
    "git": "git",
}

CATEGORY_DESCRIPTIONS = {
    "tdd": "Test-driven development workflow",
    "refactoring": "Code refactoring workflow",
    "debugging": "Debugging workflow",
    "build": "Build and compilation workflow",
    "git": "Git operations workflow",
    "lint": "Code linting and formatting workflow",
    "test": "Test execution workflow",
    "docs": "Documentation workflow",
    "other": "Automated workflow",
}

TRIGGER_CONDITIONS = {
    "tdd": ["After editing source files", "Before committing changes"],
    "refactoring": ["When refactoring code across multiple files"],
    "build": ["Before deployment", "After dependency changes"],
    "git": ["When managing version control"],
    "lint": ["Before committing changes", "During code review"],
    "test": ["After code changes", "Before merging"],
}
DEFAULT_TRIGGER_CONDITIONS = ["Manual invocation"]


def _mentions(pattern: OperationPattern, keywords: list) -> bool:
    """Whether any common command of the pattern contains one of the keywords."""
    return any(
        keyword in command.lower()
        for command in pattern.common_commands
        for keyword in keywords
    )


def _read_before_edit(pattern: OperationPattern) -> bool:
    sequence = pattern.sequence
    if "Read" not in sequence or "Edit" not in sequence:
        return False
    return sequence.index("Read") < sequence.index("Edit")


def _is_tdd(pattern: OperationPattern) -> bool:
    return (
        pattern.category == "test"
        and _read_before_edit(pattern)
        and _mentions(pattern, TEST_KEYWORDS)
    )


def _dominant_category(bash_category: str):
    return lambda pattern: pattern.category == bash_category


# Evaluated in order; the first matching predicate decides the category
CATEGORY_RULES = [
    (_is_tdd, "tdd"),
    *[(_dominant_category(bash), skill) for bash, skill in BASH_CATEGORY_MAP.items()],
    (lambda p: _mentions(p, TEST_KEYWORDS), "test"),
    (lambda p: p.sequence.count("Edit") >= REFACTORING_MIN_EDITS, "refactoring"),
    (lambda p: _mentions(p, LINT_KEYWORDS), "lint"),
    (lambda p: _mentions(p, GIT_KEYWORDS), "git"),
    (lambda p: _mentions(p, BUILD_KEYWORDS), "build"),
]


def infer_skill_category(pattern: OperationPattern) -> str:
    for predicate, category in CATEGORY_RULES:
        if predicate(pattern):
            return category
    return "other"


def is_valid_skill_pattern(pattern: OperationPattern) -> bool:
    """Check whether a pattern is a workflow worth capturing.

    A single tool repeated never qualifies. Read+Edit and Edit+Bash
    combinations qualify from MEANINGFUL_MIN_FREQUENCY occurrences; anything
    else needs FALLBACK_MIN_FREQUENCY.
    """
    tools = set(pattern.sequence)
    if len(tools) < 2:
        return False

    meaningful = {"Read", "Edit"} <= tools or {"Edit", "Bash"} <= tools
    if meaningful:
        return pattern.frequency >= MEANINGFUL_MIN_FREQUENCY

    return pattern.frequency >= FALLBACK_MIN_FREQUENCY


def generate_skill_name(pattern: OperationPattern, category: str, taken: frozenset) -> tuple:
    """Build a name unique among ``taken``.

    Returns:
        (name, taken with the new name added)
    """
    tool_part = "-".join(
        re.sub(r"[^a-z]", "", tool.lower()) for tool in pattern.sequence[:2]
    )
    prefix = "auto-" if category == "other" else f"{category}-"
    base_name = f"{prefix}{tool_part}"

    name = base_name
    counter = 1
    while name in taken:
        name = f"{base_name}-{counter}"
        counter += 1

    return name, taken | {name}


def _shorten_command(command: str) -> str:
    parts = command.split()
    short = " ".join(parts[:3])
    if len(parts) > 3:
        short += "..."
    return short


def generate_skill_description(pattern: OperationPattern, category: str) -> str:
    description = CATEGORY_DESCRIPTIONS.get(category, CATEGORY_DESCRIPTIONS["other"])

    if pattern.common_commands:
        examples = ", ".join(_shorten_command(cmd) for cmd in pattern.common_commands[:3])
        description += f" ({examples})"

    return f"{description}: {' -> '.join(pattern.sequence)}"


def generate_trigger_conditions(category: str) -> list:
    return list(TRIGGER_CONDITIONS.get(category, DEFAULT_TRIGGER_CONDITIONS))


def build_skill_candidate(pattern: OperationPattern, index: int, taken: frozenset) -> tuple:
    """Build the candidate for one pattern.

    Returns:
        (SkillCandidate, names taken after this candidate)
    """
    category = infer_skill_category(pattern)
    name, taken = generate_skill_name(pattern, category, taken)

    candidate = SkillCandidate(
        id=f"skill-{index}",
        name=name,
        description=generate_skill_description(pattern, category),
        category=category,
        trigger_conditions=generate_trigger_conditions(category),
        steps=[
            SkillStep(order=order, action=f"Execute {tool}", tool_name=tool)
            for order, tool in enumerate(pattern.sequence, 1)
        ],
        expected_frequency=pattern.frequency,
        estimated_time_saved=f"{len(pattern.sequence) * SECONDS_PER_STEP} seconds per invocation",
        source_patterns=[pattern.id],
        related_files=list(pattern.common_file_paths),
        related_commands=list(pattern.common_commands)
    )
    return candidate, taken


def synthesize_skill_candidates(patterns: list) -> list:
    """Build skill candidates for every pattern that looks like a workflow.

    Candidate names are unique within one call.
    """
    eligible = [p for p in patterns if is_valid_skill_pattern(p)]

    def step(acc, item):
        candidates, taken = acc
        index, pattern = item
        candidate, taken = build_skill_candidate(pattern, index, taken)
        return candidates + [candidate], taken

    candidates, _ = reduce(step, enumerate(eligible, 1), ([], frozenset()))
    return candidates
