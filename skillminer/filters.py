"""Classify shell commands and pull file paths out of tool calls."""

from typing import Optional

SHELL_TOOLS = frozenset(["Bash"])

# Tools whose input names a single file
FILE_TOOLS = frozenset(["Read", "Edit", "MultiEdit", "Write", "NotebookEdit", "NotebookRead"])
FILE_PATH_KEYS = ("file_path", "notebook_path")

# Commands that start with these are version control
GIT_COMMANDS = ["git ", "gh "]

INSTALL_COMMANDS = [
    "npm install", "npm i ", "npm ci", "yarn add", "yarn install",
    "pnpm add", "pnpm install", "bun add", "bun install", "pip install",
    "pip3 install", "uv add", "uv sync", "uv pip install", "poetry add",
    "poetry install", "brew install", "cargo add", "apt-get install", "go get"
]

TEST_COMMANDS = [
    "pytest", "vitest", "jest", "mocha", "npm test", "run test",
    "yarn test", "pnpm test", "bun test", "cargo test", "go test",
    "unittest", "tox"
]

TYPECHECK_COMMANDS = ["tsc", "mypy", "pyright", "typecheck", "type-check", "cargo check"]

LINT_COMMANDS = [
    "eslint", "ruff check", "biome check", "biome lint", "flake8",
    "pylint", "clippy", "golangci-lint", "lint"
]

FORMAT_COMMANDS = [
    "prettier", "black ", "ruff format", "biome format", "gofmt",
    "cargo fmt", "isort", "format"
]

BUILD_COMMANDS = [
    "npm run build", "yarn build", "pnpm build", "bun build", "cargo build",
    "go build", "webpack", "vite build", "docker build", "build"
]

# Commands that start with these run a program or script
RUN_COMMANDS = [
    "npm run", "bun run", "yarn ", "pnpm ", "npx ", "bunx ", "uv run",
    "python", "node ", "deno ", "cargo run", "go run", "make", "./"
]

# Checked in order; the first table with a match wins
CATEGORY_TABLE = [
    ("install", INSTALL_COMMANDS),
    ("test", TEST_COMMANDS),
    ("typecheck", TYPECHECK_COMMANDS),
    ("lint", LINT_COMMANDS),
    ("format", FORMAT_COMMANDS),
    ("build", BUILD_COMMANDS),
]


def _main_segment(command: str) -> str:
    """Return the first chained segment that is not a `cd`."""
    segments = command.replace(";", "&&").split("&&")
    for segment in segments:
        segment = segment.strip()
        if segment and not segment.startswith("cd "):
            return segment
    return command.strip()


def categorize_bash_command(command: str) -> str:
    """Map a shell command onto a coarse category.

    Returns one of: test, lint, format, build, git, install, typecheck, run, other.
    """
    if not command:
        return "other"

    cmd = _main_segment(command.lower())

    for git_cmd in GIT_COMMANDS:
        if cmd.startswith(git_cmd):
            return "git"

    for category, keywords in CATEGORY_TABLE:
        for keyword in keywords:
            if keyword in cmd:
                return category

    for run_cmd in RUN_COMMANDS:
        if cmd.startswith(run_cmd):
            return "run"

    return "other"


def is_shell_tool(tool_name: str) -> bool:
    return tool_name in SHELL_TOOLS


def extract_bash_command(tool_name: str, tool_input: dict) -> Optional[str]:
    """Return the command text of a shell tool call, if any."""
    if not is_shell_tool(tool_name):
        return None
    command = tool_input.get("command")
    if isinstance(command, str) and command.strip():
        return command.strip()
    return None


def extract_file_path(tool_name: str, tool_input: dict) -> Optional[str]:
    """Return the file a file-oriented tool call operates on, if any."""
    if tool_name not in FILE_TOOLS:
        return None
    for key in FILE_PATH_KEYS:
        value = tool_input.get(key)
        if isinstance(value, str) and value:
            return value
    return None
