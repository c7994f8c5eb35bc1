"""Skillminer - Find recurring workflows in Claude Code sessions.

Skillminer parses Claude Code session logs, mines repeated tool-call
sequences, scores tool-usage efficiency and proposes skill candidates
for workflows worth automating.

Basic usage:
    from skillminer import parse_session, aggregate_analysis, render

    data = parse_session(Path("~/.claude/projects/.../session.jsonl"))
    analysis = aggregate_analysis([data])
    print(render(analysis, "markdown"))

Mining a raw tool sequence:
    from skillminer import detect_patterns, PatternDetectionOptions

    patterns = detect_patterns(invocations, PatternDetectionOptions(min_frequency=3))
"""

__version__ = "0.1.0"

from .models import (
    ToolInvocation,
    ToolResult,
    SessionData,
    SessionInfo,
    SessionMetrics,
    PatternDetectionOptions,
    OperationPattern,
    PatternStats,
    SkillCandidate,
    EfficiencyEvaluation,
    AggregatedAnalysis,
)
from .parser import (
    parse_session,
    list_sessions,
    find_latest_session,
    resolve_session,
)
from .patterns import (
    extract_sequence,
    detect_patterns,
    merge_patterns,
    find_pattern,
    calculate_pattern_stats,
)
from .efficiency import calculate_session_metrics, evaluate_efficiency
from .skills import synthesize_skill_candidates
from .analyzer import aggregate_analysis
from .renderer import render
from .cli import main

__all__ = [
    # Models
    "ToolInvocation",
    "ToolResult",
    "SessionData",
    "SessionInfo",
    "SessionMetrics",
    "PatternDetectionOptions",
    "OperationPattern",
    "PatternStats",
    "SkillCandidate",
    "EfficiencyEvaluation",
    "AggregatedAnalysis",
    # Parser
    "parse_session",
    "list_sessions",
    "find_latest_session",
    "resolve_session",
    # Patterns
    "extract_sequence",
    "detect_patterns",
    "merge_patterns",
    "find_pattern",
    "calculate_pattern_stats",
    # Efficiency
    "calculate_session_metrics",
    "evaluate_efficiency",
    # Skills
    "synthesize_skill_candidates",
    # Analysis
    "aggregate_analysis",
    "render",
    # CLI
    "main",
]
