"""Find and parse Claude Code session logs."""

import json
import os
import time
from pathlib import Path
from typing import Optional

from .models import SessionData, SessionInfo, ToolInvocation, ToolResult
from .filters import categorize_bash_command, extract_bash_command, extract_file_path

MAX_ERROR_MESSAGE_LENGTH = 500


def get_claude_projects_dir() -> Path:
    """Get the Claude Code projects directory."""
    return Path.home() / ".claude" / "projects"


def get_project_hash(cwd: str) -> str:
    """Convert a filesystem path to Claude's project hash format."""
    return cwd.replace("/", "-").lstrip("-")


def _find_project_dir(project_path: str) -> Optional[Path]:
    """Find the session directory Claude keeps for a project path."""
    projects_dir = get_claude_projects_dir()
    if not projects_dir.exists():
        return None

    project_hash = get_project_hash(project_path)

    project_dir = projects_dir / project_hash
    if project_dir.is_dir():
        return project_dir

    # Try to find a matching project directory
    for p in sorted(projects_dir.iterdir()):
        if p.is_dir() and (project_hash in p.name or p.name in project_hash):
            return p

    return None


def list_sessions(
    project_path: Optional[str] = None,
    days: Optional[int] = None,
    limit: Optional[int] = None
) -> list:
    """List session files, newest first.

    Args:
        project_path: Only sessions of this project. Defaults to all projects.
        days: Only sessions modified within the last N days.
        limit: Maximum number of sessions to return.

    Returns:
        List of SessionInfo.
    """
    if project_path:
        project_dir = _find_project_dir(project_path)
        project_dirs = [project_dir] if project_dir else []
    else:
        projects_dir = get_claude_projects_dir()
        if not projects_dir.exists():
            return []
        project_dirs = [p for p in sorted(projects_dir.iterdir()) if p.is_dir()]

    cutoff = time.time() - days * 86400 if days is not None else None

    sessions = []
    for project_dir in project_dirs:
        for session_file in project_dir.glob("*.jsonl"):
            stat = session_file.stat()
            if cutoff is not None and stat.st_mtime < cutoff:
                continue
            sessions.append(SessionInfo(
                session_id=session_file.stem,
                path=str(session_file),
                project=project_dir.name,
                modified=stat.st_mtime,
                size_kb=stat.st_size / 1024
            ))

    sessions.sort(key=lambda s: s.modified, reverse=True)
    if limit is not None:
        sessions = sessions[:limit]
    return sessions


def find_latest_session(project_path: Optional[str] = None) -> Optional[Path]:
    """Find the most recent session file for a project.

    Args:
        project_path: Filesystem path to the project. Defaults to cwd.

    Returns:
        Path to the session JSONL file, or None if not found.
    """
    sessions = list_sessions(project_path or os.getcwd(), limit=1)
    if not sessions:
        return None
    return Path(sessions[0].path)


def resolve_session(session_id: str, project_path: Optional[str] = None) -> Optional[SessionInfo]:
    """Resolve a full or partial session ID to a session on disk.

    Searches the given project first, then every project.
    """
    candidates = list_sessions(project_path) if project_path else []
    candidates += list_sessions()

    for session in candidates:
        if session.session_id == session_id:
            return session
    for session in candidates:
        if session.session_id.startswith(session_id):
            return session

    return None


def parse_session(session_path: Path, project: str = "") -> SessionData:
    """Parse a session JSONL file into tool invocations, results and counts.

    Args:
        session_path: Path to the .jsonl session file.
        project: Project name to record on the session.

    Returns:
        SessionData for the file.
    """
    session_path = Path(session_path)
    data = SessionData(
        session_id=session_path.stem,
        path=str(session_path),
        project=project or session_path.parent.name
    )
    tool_names = {}

    with open(session_path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            if not line.strip():
                continue

            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                continue

            if isinstance(entry, dict):
                _process_entry(entry, data, tool_names)

    return data


def _process_entry(entry: dict, data: SessionData, tool_names: dict) -> None:
    """Process a single JSONL entry and update SessionData."""
    timestamp = entry.get("timestamp")
    if isinstance(timestamp, str) and timestamp:
        if not data.start_time or timestamp < data.start_time:
            data.start_time = timestamp
        if not data.end_time or timestamp > data.end_time:
            data.end_time = timestamp

    if entry.get("type") == "user":
        _process_user_message(entry, data, tool_names)

    if entry.get("type") == "assistant":
        _process_assistant_message(entry, data, tool_names)


def _process_user_message(entry: dict, data: SessionData, tool_names: dict) -> None:
    """Count user prompts and collect tool results."""
    message = entry.get("message")
    if not isinstance(message, dict):
        return
    content = message.get("content", [])
    timestamp = _entry_timestamp(entry)

    if isinstance(content, str):
        if content.strip():
            data.user_message_count += 1
        return

    if not isinstance(content, list):
        return

    has_text = False
    for block in content:
        if not isinstance(block, dict):
            continue

        text = block.get("text")
        if block.get("type") == "text" and isinstance(text, str) and text.strip():
            has_text = True

        if block.get("type") == "tool_result":
            data.tool_results.append(_process_tool_result(block, timestamp, tool_names))

    if has_text:
        data.user_message_count += 1


def _string_or_none(value) -> Optional[str]:
    return value if isinstance(value, str) else None


def _entry_timestamp(entry: dict) -> str:
    return _string_or_none(entry.get("timestamp")) or ""


def _process_tool_result(block: dict, timestamp: str, tool_names: dict) -> ToolResult:
    tool_use_id = _string_or_none(block.get("tool_use_id")) or ""
    is_error = bool(block.get("is_error", False))

    error_message = None
    if is_error:
        error_message = _content_text(block.get("content"))[:MAX_ERROR_MESSAGE_LENGTH]

    return ToolResult(
        timestamp=timestamp,
        tool_use_id=tool_use_id,
        tool_name=tool_names.get(tool_use_id, ""),
        is_error=is_error,
        error_message=error_message
    )


def _content_text(content) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "\n".join(
            block["text"] for block in content
            if isinstance(block, dict) and block.get("type") == "text" and isinstance(block.get("text"), str)
        )
    return ""


def _process_assistant_message(entry: dict, data: SessionData, tool_names: dict) -> None:
    """Collect tool calls from an assistant message."""
    message = entry.get("message")
    if not isinstance(message, dict):
        return
    content = message.get("content", [])
    timestamp = _entry_timestamp(entry)

    data.assistant_message_count += 1

    if not isinstance(content, list):
        return

    for block in content:
        if isinstance(block, dict) and block.get("type") == "tool_use":
            invocation = _process_tool_call(block, timestamp)
            if invocation:
                data.tool_invocations.append(invocation)
                if invocation.tool_use_id:
                    tool_names[invocation.tool_use_id] = invocation.tool_name


def _process_tool_call(block: dict, timestamp: str) -> Optional[ToolInvocation]:
    """Turn a tool_use block into a ToolInvocation."""
    tool_name = block.get("name")
    if not isinstance(tool_name, str) or not tool_name:
        return None

    tool_input = block.get("input")
    if not isinstance(tool_input, dict):
        tool_input = {}

    bash_command = extract_bash_command(tool_name, tool_input)

    return ToolInvocation(
        timestamp=timestamp,
        tool_name=tool_name,
        tool_input=tool_input,
        bash_command=bash_command,
        bash_category=categorize_bash_command(bash_command) if bash_command else None,
        file_path=extract_file_path(tool_name, tool_input),
        tool_use_id=_string_or_none(block.get("id"))
    )
