"""
Unit tests for the full analysis run.

Tests cover:
- Summary totals, most used tools and frequent patterns
- Analyzed period
- Pattern options, --no-patterns and per-session mining
- Empty input
"""

import pytest

from skillminer.analyzer import aggregate_analysis
from skillminer.models import SessionData, ToolInvocation, ToolResult


def make_session(session_id, names, errors=0, start="2025-01-18T10:00:00Z"):
    invocations = [
        ToolInvocation(
            timestamp=start,
            tool_name=name,
            tool_input={"file_path": f"src/{i}.py"} if name == "Edit" else {},
            file_path=f"src/{i}.py" if name == "Edit" else None,
            tool_use_id=f"{session_id}-{i}"
        )
        for i, name in enumerate(names)
    ]
    results = [
        ToolResult(timestamp=start, tool_use_id=inv.tool_use_id, tool_name=inv.tool_name, is_error=i < errors)
        for i, inv in enumerate(invocations)
    ]
    return SessionData(
        session_id=session_id,
        project="demo",
        tool_invocations=invocations,
        tool_results=results,
        user_message_count=2,
        start_time=start,
        end_time=start
    )


def test_summary_totals():
    sessions = [
        make_session("a", ["Read", "Edit", "Bash"] * 3, errors=2, start="2025-01-18T10:00:00Z"),
        make_session("b", ["Read", "Grep"], start="2025-01-17T09:00:00Z"),
    ]

    analysis = aggregate_analysis(sessions)
    summary = analysis.summary

    assert summary.total_tool_calls == 11
    assert summary.total_errors == 2
    assert summary.overall_error_rate == pytest.approx(2 / 11)
    assert summary.most_used_tools[0] == {"name": "Read", "count": 4}
    assert {"name": "Grep", "count": 1} in summary.most_used_tools


def test_analyzed_period():
    sessions = [
        make_session("a", ["Read"], start="2025-01-18T10:00:00Z"),
        make_session("b", ["Read"], start="2025-01-16T10:00:00Z"),
        make_session("c", ["Read"], start="2025-01-17T10:00:00Z"),
    ]

    period = aggregate_analysis(sessions).analyzed_period

    assert period.start == "2025-01-16T10:00:00Z"
    assert period.end == "2025-01-18T10:00:00Z"
    assert period.total_sessions == 3


def test_patterns_and_skills():
    sessions = [make_session("a", ["Read", "Edit", "Bash"] * 3)]

    analysis = aggregate_analysis(sessions, pattern_max_length=3)

    assert analysis.patterns[0].sequence == ["Read", "Edit", "Bash"]
    assert analysis.patterns[0].frequency == 3
    assert analysis.summary.most_frequent_patterns[0] == {
        "sequence": ["Read", "Edit", "Bash"],
        "frequency": 3,
    }
    assert len(analysis.skill_candidates) == len(analysis.patterns)
    assert analysis.skill_candidates[0].source_patterns == [analysis.patterns[0].id]
    assert analysis.skill_candidates[0].steps[0].tool_name == "Read"


def test_without_patterns():
    sessions = [make_session("a", ["Read", "Edit"] * 5)]

    analysis = aggregate_analysis(sessions, include_patterns=False)

    assert analysis.patterns == []
    assert analysis.skill_candidates == []
    assert analysis.summary.most_frequent_patterns == []
    assert analysis.summary.total_tool_calls == 10


def test_min_frequency_is_applied():
    sessions = [make_session("a", ["Read", "Edit"] * 3)]

    analysis = aggregate_analysis(sessions, pattern_min_frequency=4)

    assert analysis.patterns == []


def test_per_session_patterns_do_not_span_sessions():
    sessions = [
        make_session("a", ["Read", "Edit", "Read", "Edit"]),
        make_session("b", ["Bash", "Read", "Edit"]),
    ]

    joined = aggregate_analysis(sessions, pattern_max_length=2)
    separate = aggregate_analysis(sessions, pattern_max_length=2, per_session=True)

    assert ["Edit", "Bash"] not in [p.sequence for p in separate.patterns]
    read_edit = next(p for p in separate.patterns if p.sequence == ["Read", "Edit"])
    assert read_edit.frequency == 2
    assert [p.sequence for p in joined.patterns][0] == ["Read", "Edit"]


@pytest.mark.parametrize("kwargs", [
    {"pattern_min_frequency": 0},
    {"pattern_max_length": 1},
])
def test_invalid_pattern_options(kwargs):
    with pytest.raises(ValueError):
        aggregate_analysis([make_session("a", ["Read", "Edit"])], **kwargs)


def test_empty_sessions():
    analysis = aggregate_analysis([])

    assert analysis.analyzed_period.total_sessions == 0
    assert analysis.analyzed_period.start == analysis.analyzed_period.end
    assert analysis.summary.total_tool_calls == 0
    assert analysis.summary.overall_error_rate == 0
    assert analysis.efficiency.overall_score == 100
    assert analysis.patterns == []


def test_top_recommendations_come_from_efficiency():
    sessions = [make_session("a", ["Read", "Edit"] * 5, errors=5)]

    analysis = aggregate_analysis(sessions)

    assert analysis.summary.top_recommendations == analysis.efficiency.recommendations[:3]
    assert analysis.summary.top_recommendations[0].id == "reduce-errors"


def test_per_session_pattern_ids_are_unique():
    sessions = [
        make_session("a", ["Read", "Edit"] * 3),
        make_session("b", ["Glob", "Grep"] * 3),
    ]

    analysis = aggregate_analysis(sessions, pattern_max_length=2, per_session=True)

    ids = [p.id for p in analysis.patterns]
    assert len(ids) == 4
    assert len(ids) == len(set(ids))
    assert ids == [f"pattern-{i}" for i in range(1, len(ids) + 1)]
    pattern_ids = set(ids)
    assert all(s.source_patterns[0] in pattern_ids for s in analysis.skill_candidates)
