"""
Unit tests for efficiency evaluation.

Tests cover:
- Session metrics from parsed sessions
- Retry counting on Edit/Write chains
- Error-rate and retry-rate issues with their severities
- Score formula and bounds
- Tool diversity and tools per task
- Fallback to raw results when no session metrics are given
"""

import pytest

from skillminer.efficiency import calculate_session_metrics, count_retries, evaluate_efficiency
from skillminer.models import SessionData, ToolInvocation, ToolResult


def make_session(session_id, names, errors=0, user_messages=1, start="2025-01-18T10:00:00Z", end="2025-01-18T10:30:00Z"):
    invocations = [
        ToolInvocation(timestamp=start, tool_name=name, tool_use_id=f"{session_id}-{i}")
        for i, name in enumerate(names)
    ]
    results = [
        ToolResult(timestamp=start, tool_use_id=inv.tool_use_id, tool_name=inv.tool_name, is_error=i < errors)
        for i, inv in enumerate(invocations)
    ]
    return SessionData(
        session_id=session_id,
        path=f"/tmp/{session_id}.jsonl",
        project="demo",
        tool_invocations=invocations,
        tool_results=results,
        user_message_count=user_messages,
        assistant_message_count=len(names),
        start_time=start,
        end_time=end
    )


def edit(path, tool="Edit"):
    return ToolInvocation(
        timestamp="2025-01-18T10:00:00Z",
        tool_name=tool,
        tool_input={"file_path": path},
        file_path=path
    )


def read(path):
    return ToolInvocation(timestamp="2025-01-18T10:00:00Z", tool_name="Read", tool_input={"file_path": path})


def evaluate(*sessions):
    invocations = [inv for s in sessions for inv in s.tool_invocations]
    results = [r for s in sessions for r in s.tool_results]
    metrics = [calculate_session_metrics(s) for s in sessions]
    return evaluate_efficiency(invocations, results, metrics)


def test_session_metrics():
    session = make_session("abc", ["Read", "Edit", "Read"], errors=1, user_messages=2)

    metrics = calculate_session_metrics(session)

    assert metrics.session_id == "abc"
    assert metrics.project_name == "demo"
    assert metrics.total_tool_calls == 3
    assert metrics.error_count == 1
    assert metrics.error_rate == pytest.approx(1 / 3)
    assert metrics.unique_tools_used == 2
    assert metrics.tool_breakdown == {"Read": 2, "Edit": 1}
    assert metrics.duration_minutes == pytest.approx(30)
    assert metrics.user_message_count == 2


def test_session_metrics_empty_session():
    metrics = calculate_session_metrics(SessionData(session_id="empty"))

    assert metrics.total_tool_calls == 0
    assert metrics.error_rate == 0
    assert metrics.duration_minutes == 0
    assert metrics.tool_breakdown == {}


def test_retry_on_same_file():
    """Edit(A), Edit(A), Edit(B) is one retry."""
    assert count_retries([edit("A"), edit("A"), edit("B")]) == 1


def test_retry_chain_broken_by_other_tool():
    assert count_retries([edit("A"), read("A"), edit("A")]) == 0


def test_retry_across_edit_and_write():
    assert count_retries([edit("A"), edit("A", tool="Write"), edit("A")]) == 2


def test_retry_needs_a_file_path():
    no_path = ToolInvocation(timestamp="2025-01-18T10:00:00Z", tool_name="Edit")

    assert count_retries([no_path, no_path]) == 0


def test_high_error_rate_is_high_severity():
    """3 errors in 10 calls is a 30% error rate."""
    session = make_session("s1", ["Read", "Edit"] * 5, errors=3)

    evaluation = evaluate(session)

    assert evaluation.metrics.error_rate == pytest.approx(0.3)
    issue = next(i for i in evaluation.issues if i.type == "high_error_rate")
    assert issue.severity == "high"
    assert issue.affected_sessions == ["s1"]
    assert issue.description == "Overall error rate is 30.0%"
    assert [r.title for r in evaluation.recommendations] == ["Reduce Tool Execution Errors"]
    assert evaluation.recommendations[0].priority == "high"


def test_moderate_error_rate_is_medium_severity():
    session = make_session("s1", ["Read", "Edit"] * 10, errors=3)

    evaluation = evaluate(session)

    assert evaluation.metrics.error_rate == pytest.approx(0.15)
    assert evaluation.issues[0].type == "high_error_rate"
    assert evaluation.issues[0].severity == "medium"


def test_error_rate_at_threshold_raises_nothing():
    session = make_session("s1", ["Read", "Edit"] * 5, errors=1)

    evaluation = evaluate(session)

    assert evaluation.issues == []
    assert evaluation.recommendations == []


def test_affected_sessions_only_above_threshold():
    bad = make_session("bad", ["Read", "Edit"] * 5, errors=5)
    good = make_session("good", ["Read", "Edit"] * 5, errors=0)

    evaluation = evaluate(bad, good)

    assert evaluation.metrics.error_rate == pytest.approx(0.25)
    assert evaluation.issues[0].affected_sessions == ["bad"]


def test_excessive_retries():
    invocations = [edit("A")] * 4
    evaluation = evaluate_efficiency(invocations, [], [])

    assert evaluation.metrics.retry_rate == pytest.approx(0.75)
    issue = next(i for i in evaluation.issues if i.type == "excessive_retries")
    assert issue.severity == "high"


def test_moderate_retries_are_medium_severity():
    # 1 retry in 5 calls
    invocations = [edit("A"), edit("A"), read("B"), read("C"), read("D")]
    evaluation = evaluate_efficiency(invocations, [], [])

    assert evaluation.metrics.retry_rate == pytest.approx(0.2)
    assert evaluation.issues[0].type == "excessive_retries"
    assert evaluation.issues[0].severity == "medium"


def test_score_formula():
    session = make_session("s1", ["Read", "Edit"] * 10, errors=1)

    evaluation = evaluate(session)

    assert evaluation.overall_score == pytest.approx(95)


def test_score_bounds_with_everything_failing():
    session = make_session("s1", ["Edit"] * 10, errors=10)
    for inv in session.tool_invocations:
        inv.tool_input["file_path"] = "same.py"

    evaluation = evaluate(session)

    assert evaluation.metrics.error_rate == 1
    assert 0 <= evaluation.overall_score <= 100
    assert evaluation.overall_score == pytest.approx(50)


def test_score_decreases_with_errors():
    scores = [
        evaluate(make_session("s", ["Read", "Edit"] * 10, errors=e)).overall_score
        for e in range(0, 8)
    ]

    assert scores == sorted(scores, reverse=True)


def test_diversity_and_tools_per_task():
    first = make_session("a", ["Read", "Edit", "Bash"], user_messages=1)
    second = make_session("b", ["Read", "Grep", "Read"], user_messages=2)

    evaluation = evaluate(first, second)

    assert evaluation.metrics.tool_diversity == 4
    assert evaluation.metrics.average_tools_per_task == pytest.approx(2)


def test_empty_input():
    evaluation = evaluate_efficiency([], [], [])

    assert evaluation.overall_score == 100
    assert evaluation.metrics.error_rate == 0
    assert evaluation.metrics.retry_rate == 0
    assert evaluation.metrics.tool_diversity == 0
    assert evaluation.metrics.average_tools_per_task == 0
    assert evaluation.issues == []


def test_results_used_without_session_metrics():
    session = make_session("s1", ["Read", "Edit"] * 5, errors=3)

    evaluation = evaluate_efficiency(session.tool_invocations, session.tool_results, [])

    assert evaluation.metrics.error_rate == pytest.approx(0.3)
    assert evaluation.issues[0].affected_sessions == []


def test_duration_with_uneven_fractional_seconds():
    session = make_session(
        "s1", ["Read"],
        start="2025-01-18T10:00:00.12345Z",
        end="2025-01-18T10:06:00.12345Z"
    )

    assert calculate_session_metrics(session).duration_minutes == pytest.approx(6)
