"""Score how efficiently tools were used across sessions."""

from .models import (
    EfficiencyEvaluation,
    EfficiencyIssue,
    EfficiencyMetrics,
    Recommendation,
    SessionData,
    SessionMetrics,
    parse_timestamp,
)

HIGH_ERROR_RATE_THRESHOLD = 0.1
SEVERE_ERROR_RATE_THRESHOLD = 0.2
EXCESSIVE_RETRY_THRESHOLD = 0.15
SEVERE_RETRY_THRESHOLD = 0.25

# Largest number of points each rate can take off the score
MAX_ERROR_PENALTY = 30
MAX_RETRY_PENALTY = 20

EDIT_TOOLS = ("Edit", "Write")


def _duration_minutes(start: str, end: str) -> float:
    try:
        return (parse_timestamp(end) - parse_timestamp(start)).total_seconds() / 60
    except (ValueError, TypeError):
        return 0.0


def calculate_session_metrics(data: SessionData) -> SessionMetrics:
    """Compute call, error and message counts for one parsed session."""
    start_time = data.start_time or ""
    end_time = data.end_time or start_time

    total_tool_calls = len(data.tool_invocations)
    error_count = sum(1 for r in data.tool_results if r.is_error)

    tool_breakdown = {}
    for inv in data.tool_invocations:
        tool_breakdown[inv.tool_name] = tool_breakdown.get(inv.tool_name, 0) + 1

    return SessionMetrics(
        session_id=data.session_id,
        session_path=data.path,
        project_name=data.project,
        start_time=start_time,
        end_time=end_time,
        duration_minutes=_duration_minutes(start_time, end_time),
        total_tool_calls=total_tool_calls,
        error_count=error_count,
        error_rate=error_count / total_tool_calls if total_tool_calls else 0,
        unique_tools_used=len(tool_breakdown),
        user_message_count=data.user_message_count,
        assistant_message_count=data.assistant_message_count,
        tool_breakdown=tool_breakdown
    )


def _edited_path(invocation):
    return invocation.tool_input.get("file_path") or invocation.file_path


def count_retries(invocations: list) -> int:
    """Count Edit/Write calls that hit the same file as the Edit/Write just before.

    Any other tool in between breaks the chain.
    """
    retries = 0
    last_edit_file = None

    for inv in invocations:
        if inv.tool_name in EDIT_TOOLS:
            file_path = _edited_path(inv)
            if file_path and file_path == last_edit_file:
                retries += 1
            last_edit_file = file_path
        else:
            last_edit_file = None

    return retries


def _severity(rate: float, severe_threshold: float) -> str:
    return "high" if rate > severe_threshold else "medium"


def evaluate_efficiency(invocations: list, results: list, session_metrics: list) -> EfficiencyEvaluation:
    """Evaluate error and retry behaviour across sessions.

    Args:
        invocations: Every tool call, unfiltered, in order.
        results: Tool results. Only used for error counts when no
            session metrics are given.
        session_metrics: Per-session counts.

    Returns:
        EfficiencyEvaluation with a 0-100 score. Error rate costs up to 30
        points and retry rate up to 20.
    """
    issues = []
    recommendations = []

    if session_metrics:
        total_tool_calls = sum(m.total_tool_calls for m in session_metrics)
        total_errors = sum(m.error_count for m in session_metrics)
    else:
        total_tool_calls = len(invocations)
        total_errors = sum(1 for r in results if r.is_error)

    error_rate = total_errors / total_tool_calls if total_tool_calls else 0

    if error_rate > HIGH_ERROR_RATE_THRESHOLD:
        issues.append(EfficiencyIssue(
            type="high_error_rate",
            severity=_severity(error_rate, SEVERE_ERROR_RATE_THRESHOLD),
            description=f"Overall error rate is {error_rate * 100:.1f}%",
            affected_sessions=[
                m.session_id for m in session_metrics
                if m.error_rate > HIGH_ERROR_RATE_THRESHOLD
            ],
            suggested_fix="Review error patterns and consider adding validation steps"
        ))
        recommendations.append(Recommendation(
            id="reduce-errors",
            type="workflow_improvement",
            priority="high",
            title="Reduce Tool Execution Errors",
            description=(
                "High error rate detected. Consider adding pre-validation steps "
                "or error handling patterns."
            ),
            expected_benefit="Reduced retry attempts and faster task completion"
        ))

    retries = count_retries(invocations)
    retry_rate = retries / len(invocations) if invocations else 0

    if retry_rate > EXCESSIVE_RETRY_THRESHOLD:
        issues.append(EfficiencyIssue(
            type="excessive_retries",
            severity=_severity(retry_rate, SEVERE_RETRY_THRESHOLD),
            description=f"Retry rate is {retry_rate * 100:.1f}%",
            affected_sessions=[m.session_id for m in session_metrics],
            suggested_fix="Consider reading files before editing to understand context"
        ))

    total_user_messages = sum(m.user_message_count for m in session_metrics)

    error_penalty = min(error_rate * 100, MAX_ERROR_PENALTY)
    retry_penalty = min(retry_rate * 50, MAX_RETRY_PENALTY)

    return EfficiencyEvaluation(
        overall_score=max(0, 100 - error_penalty - retry_penalty),
        metrics=EfficiencyMetrics(
            error_rate=error_rate,
            retry_rate=retry_rate,
            tool_diversity=len({inv.tool_name for inv in invocations}),
            average_tools_per_task=(
                total_tool_calls / total_user_messages if total_user_messages else 0
            )
        ),
        issues=issues,
        recommendations=recommendations
    )
