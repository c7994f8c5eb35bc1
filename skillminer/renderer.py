"""Render an analysis as text, markdown or JSON."""

import json

from .models import AggregatedAnalysis, EfficiencyEvaluation

RULE = "─" * 50

SEVERITY_ICONS = {"high": "!!!", "medium": "!!", "low": "!"}
PRIORITY_LABELS = {"high": "[HIGH]", "medium": "[MED]", "low": "[LOW]"}

FORMATS = ("text", "json", "markdown")


def render(analysis: AggregatedAnalysis, fmt: str = "text", verbose: bool = False) -> str:
    """Render an analysis in the requested format."""
    if fmt == "json":
        return render_json(analysis)
    if fmt == "markdown":
        return render_markdown(analysis)
    return render_text(analysis, verbose=verbose)


def render_json(analysis: AggregatedAnalysis) -> str:
    return json.dumps(analysis.to_dict(), indent=2, ensure_ascii=False)


def _pct(rate: float) -> str:
    return f"{rate * 100:.1f}%"


def _period(analysis: AggregatedAnalysis) -> str:
    period = analysis.analyzed_period
    return f"{period.start[:10]} - {period.end[:10]}"


def render_text(analysis: AggregatedAnalysis, verbose: bool = False) -> str:
    """Render a plain-text report.

    Sections:
        - Period and session count
        - Summary and most used tools
        - Efficiency score and issues
        - Top patterns
        - Session details (verbose only)
        - Top skill candidates
        - Recommendations
    """
    summary = analysis.summary
    lines = ["", "=== Claude Code Log Analysis ===", RULE]

    lines.append("")
    lines.append(f"Analyzed Period: {_period(analysis)}")
    lines.append(f"Total Sessions: {analysis.analyzed_period.total_sessions}")

    lines.append("")
    lines.append("--- Summary ---")
    lines.append(f"Total Tool Calls: {summary.total_tool_calls}")
    lines.append(f"Total Errors: {summary.total_errors}")
    lines.append(f"Error Rate: {_pct(summary.overall_error_rate)}")

    lines.append("")
    lines.append("Most Used Tools:")
    for tool in summary.most_used_tools[:5]:
        lines.append(f"  {tool['name']}: {tool['count']} calls")

    _render_efficiency(lines, analysis.efficiency)

    if analysis.patterns:
        _render_patterns(lines, analysis.patterns[:5])

    if verbose:
        _render_sessions(lines, analysis.session_metrics)

    if analysis.skill_candidates:
        lines.append("")
        lines.append("--- Skill Candidates ---")
        for skill in analysis.skill_candidates[:3]:
            lines.append("")
            lines.append(f"* {skill.name}")
            lines.append(f"  {skill.description}")
            lines.append(f"  Frequency: {skill.expected_frequency} times")
            lines.append(f"  Est. Time Saved: {skill.estimated_time_saved}")

    if summary.top_recommendations:
        lines.append("")
        lines.append("--- Recommendations ---")
        for rec in summary.top_recommendations:
            lines.append("")
            lines.append(f"{PRIORITY_LABELS.get(rec.priority, '')} {rec.title}")
            lines.append(f"  {rec.description}")
            lines.append(f"  Expected: {rec.expected_benefit}")

    lines.append("")
    lines.append(RULE)
    return "\n".join(lines)


def _render_efficiency(lines: list, efficiency: EfficiencyEvaluation) -> None:
    """Render the efficiency score and issues."""
    metrics = efficiency.metrics
    lines.append("")
    lines.append("--- Efficiency Score ---")
    lines.append(f"Overall Score: {efficiency.overall_score:.0f}/100")
    lines.append(f"  Error Rate: {_pct(metrics.error_rate)}")
    lines.append(f"  Retry Rate: {_pct(metrics.retry_rate)}")
    lines.append(f"  Tool Diversity: {metrics.tool_diversity} tools")
    lines.append(f"  Avg Tools/Task: {metrics.average_tools_per_task:.1f}")

    if efficiency.issues:
        lines.append("")
        lines.append("Issues:")
        for issue in efficiency.issues:
            lines.append(f"  {SEVERITY_ICONS.get(issue.severity, '!')} {issue.description}")
            if issue.suggested_fix:
                lines.append(f"    Fix: {issue.suggested_fix}")


def _render_patterns(lines: list, patterns: list) -> None:
    lines.append("")
    lines.append("--- Detected Patterns ---")
    for pattern in patterns:
        lines.append("")
        lines.append(f"* {' -> '.join(pattern.sequence)} ({pattern.frequency}x)")
        lines.append(f"  First seen: {pattern.first_seen[:10]}")
        lines.append(f"  Success rate: {pattern.success_rate * 100:.0f}%")
        if pattern.common_commands:
            lines.append(f"  Commands: {', '.join(pattern.common_commands[:3])}")


def _render_sessions(lines: list, session_metrics: list) -> None:
    lines.append("")
    lines.append("--- Session Details ---")
    for metrics in session_metrics:
        lines.append("")
        lines.append(f"{metrics.session_id[:8]}... ({metrics.project_name})")
        lines.append(f"  Duration: {metrics.duration_minutes:.1f} minutes")
        lines.append(f"  Tool Calls: {metrics.total_tool_calls}")
        lines.append(f"  Errors: {metrics.error_count}")
        lines.append(f"  User Messages: {metrics.user_message_count}")


def render_markdown(analysis: AggregatedAnalysis) -> str:
    """Render a markdown report suitable for pasting into notes or PRs."""
    summary = analysis.summary
    efficiency = analysis.efficiency
    lines = ["# Claude Code Log Analysis Report", ""]

    lines.append(f"**Period:** {_period(analysis)}")
    lines.append(f"**Total Sessions:** {analysis.analyzed_period.total_sessions}")
    lines.append("")

    lines.append("## Summary")
    lines.append("")
    lines.append("| Metric | Value |")
    lines.append("|--------|-------|")
    lines.append(f"| Total Tool Calls | {summary.total_tool_calls} |")
    lines.append(f"| Total Errors | {summary.total_errors} |")
    lines.append(f"| Error Rate | {_pct(summary.overall_error_rate)} |")
    lines.append(f"| Retry Rate | {_pct(efficiency.metrics.retry_rate)} |")
    lines.append(f"| Efficiency Score | {efficiency.overall_score:.0f}/100 |")
    lines.append("")

    lines.append("## Most Used Tools")
    lines.append("")
    for tool in summary.most_used_tools:
        lines.append(f"- **{tool['name']}**: {tool['count']} calls")
    lines.append("")

    if efficiency.issues:
        lines.append("## Issues")
        lines.append("")
        for issue in efficiency.issues:
            lines.append(f"- `[{issue.severity}]` {issue.description}")
            if issue.suggested_fix:
                lines.append(f"  _{issue.suggested_fix}_")
        lines.append("")

    if analysis.patterns:
        lines.append("## Detected Patterns")
        lines.append("")
        for pattern in analysis.patterns[:10]:
            lines.append(f"### {' → '.join(pattern.sequence)} ({pattern.frequency}x)")
            lines.append("")
            lines.append(f"- First seen: {pattern.first_seen[:10]}")
            lines.append(f"- Last seen: {pattern.last_seen[:10]}")
            if pattern.category:
                lines.append(f"- Category: {pattern.category}")
            lines.append("")

    if analysis.skill_candidates:
        lines.append("## Skill Candidates")
        lines.append("")
        for skill in analysis.skill_candidates:
            lines.append(f"### {skill.name}")
            lines.append("")
            lines.append(skill.description)
            lines.append("")
            lines.append(f"- **Frequency:** {skill.expected_frequency} times")
            lines.append(f"- **Time Saved:** {skill.estimated_time_saved}")
            lines.append("")

    if summary.top_recommendations:
        lines.append("## Recommendations")
        lines.append("")
        for rec in summary.top_recommendations:
            lines.append(f"### [{rec.priority.upper()}] {rec.title}")
            lines.append("")
            lines.append(rec.description)
            lines.append("")
            lines.append(f"**Expected Benefit:** {rec.expected_benefit}")
            lines.append("")

    return "\n".join(lines)
