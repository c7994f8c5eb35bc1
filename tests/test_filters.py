"""
Unit tests for shell-command categorisation and file-path extraction.
"""

import pytest

from skillminer.filters import categorize_bash_command, extract_bash_command, extract_file_path


@pytest.mark.parametrize("command,expected", [
    ("git status", "git"),
    ("git commit -m 'fix tests'", "git"),
    ("gh pr create --fill", "git"),
    ("pytest tests/ -x", "test"),
    ("npm test", "test"),
    ("bun run test", "test"),
    ("npx vitest run", "test"),
    ("cargo test --all", "test"),
    ("npx tsc --noEmit", "typecheck"),
    ("mypy skillminer", "typecheck"),
    ("ruff check .", "lint"),
    ("npm run lint", "lint"),
    ("npx prettier --write src", "format"),
    ("ruff format .", "format"),
    ("npm run build", "build"),
    ("cargo build --release", "build"),
    ("npm install -D vitest", "install"),
    ("pip install -e .", "install"),
    ("python scripts/run.py", "run"),
    ("npm run dev", "run"),
    ("make", "run"),
    ("ls -la", "other"),
    ("", "other"),
])
def test_categorize_bash_command(command, expected):
    assert categorize_bash_command(command) == expected


def test_categorize_skips_leading_cd():
    assert categorize_bash_command("cd frontend && npm test") == "test"
    assert categorize_bash_command("cd repo; git log --oneline") == "git"


def test_categorize_is_case_insensitive():
    assert categorize_bash_command("PYTEST -q") == "test"


def test_extract_bash_command():
    assert extract_bash_command("Bash", {"command": "  ls -la  "}) == "ls -la"
    assert extract_bash_command("Bash", {"command": ""}) is None
    assert extract_bash_command("Bash", {}) is None
    assert extract_bash_command("Read", {"command": "ls"}) is None


def test_extract_file_path():
    assert extract_file_path("Edit", {"file_path": "/src/app.py"}) == "/src/app.py"
    assert extract_file_path("NotebookEdit", {"notebook_path": "/nb.ipynb"}) == "/nb.ipynb"
    assert extract_file_path("Grep", {"path": "/src"}) is None
    assert extract_file_path("Write", {}) is None
