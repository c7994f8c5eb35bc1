"""Run the full analysis over parsed sessions."""

from dataclasses import replace
from datetime import datetime, timezone

from .models import (
    AggregatedAnalysis,
    AnalysisSummary,
    AnalyzedPeriod,
    EfficiencyEvaluation,
    PatternDetectionOptions,
)
from .efficiency import calculate_session_metrics, evaluate_efficiency
from .patterns import detect_patterns, merge_patterns
from .skills import synthesize_skill_candidates

DEFAULT_PATTERN_MIN_FREQUENCY = 2
DEFAULT_PATTERN_MAX_LENGTH = 5
DEFAULT_PATTERN_MIN_LENGTH = 2

MOST_USED_TOOLS_LIMIT = 10
FREQUENT_PATTERNS_LIMIT = 5
TOP_RECOMMENDATIONS_LIMIT = 3


def aggregate_analysis(
    sessions: list,
    include_patterns: bool = True,
    pattern_min_frequency: int = DEFAULT_PATTERN_MIN_FREQUENCY,
    pattern_max_length: int = DEFAULT_PATTERN_MAX_LENGTH,
    per_session: bool = False
) -> AggregatedAnalysis:
    """Analyze a set of parsed sessions.

    Args:
        sessions: SessionData objects, as returned by parse_session.
        include_patterns: Mine tool patterns and skill candidates.
        pattern_min_frequency: Minimum occurrences for a pattern.
        pattern_max_length: Longest tool sequence to consider.
        per_session: Mine each session on its own and merge the results, so
            no pattern spans two sessions.

    Returns:
        AggregatedAnalysis for all sessions.

    Raises:
        ValueError: If the pattern options are inconsistent.
    """
    options = PatternDetectionOptions(
        min_frequency=pattern_min_frequency,
        max_sequence_length=pattern_max_length,
        min_sequence_length=DEFAULT_PATTERN_MIN_LENGTH
    )
    options.validate()

    all_invocations = []
    all_results = []
    session_metrics = []

    for session in sessions:
        all_invocations.extend(session.tool_invocations)
        all_results.extend(session.tool_results)
        session_metrics.append(calculate_session_metrics(session))

    efficiency = evaluate_efficiency(all_invocations, all_results, session_metrics)

    patterns = []
    if include_patterns:
        if per_session:
            merged = merge_patterns([
                detect_patterns(session.tool_invocations, options) for session in sessions
            ])
            # Each session numbers its patterns from 1
            patterns = [replace(p, id=f"pattern-{i}") for i, p in enumerate(merged, 1)]
        else:
            patterns = detect_patterns(all_invocations, options)

    return AggregatedAnalysis(
        analyzed_period=_analyzed_period(session_metrics),
        session_metrics=session_metrics,
        patterns=patterns,
        efficiency=efficiency,
        skill_candidates=synthesize_skill_candidates(patterns),
        summary=generate_summary(session_metrics, patterns, efficiency)
    )


def _analyzed_period(session_metrics: list) -> AnalyzedPeriod:
    starts = sorted(m.start_time for m in session_metrics if m.start_time)
    if not starts:
        now = datetime.now(timezone.utc).isoformat()
        return AnalyzedPeriod(start=now, end=now, total_sessions=len(session_metrics))
    return AnalyzedPeriod(start=starts[0], end=starts[-1], total_sessions=len(session_metrics))


def generate_summary(
    session_metrics: list,
    patterns: list,
    efficiency: EfficiencyEvaluation
) -> AnalysisSummary:
    """Headline numbers: totals, most used tools, most frequent patterns."""
    total_tool_calls = sum(m.total_tool_calls for m in session_metrics)
    total_errors = sum(m.error_count for m in session_metrics)

    tool_counts = {}
    for metrics in session_metrics:
        for tool, count in metrics.tool_breakdown.items():
            tool_counts[tool] = tool_counts.get(tool, 0) + count

    most_used = sorted(tool_counts.items(), key=lambda item: item[1], reverse=True)
    most_frequent = sorted(patterns, key=lambda p: p.frequency, reverse=True)

    return AnalysisSummary(
        total_tool_calls=total_tool_calls,
        total_errors=total_errors,
        overall_error_rate=total_errors / total_tool_calls if total_tool_calls else 0,
        most_used_tools=[
            {"name": name, "count": count}
            for name, count in most_used[:MOST_USED_TOOLS_LIMIT]
        ],
        most_frequent_patterns=[
            {"sequence": list(p.sequence), "frequency": p.frequency}
            for p in most_frequent[:FREQUENT_PATTERNS_LIMIT]
        ],
        top_recommendations=efficiency.recommendations[:TOP_RECOMMENDATIONS_LIMIT]
    )
