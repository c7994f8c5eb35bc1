"""Data models for skillminer session analysis."""

import re
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Optional

# Joins tool names into a pattern key. Tool names never contain it.
SEQUENCE_SEPARATOR = "\x1f"

_FRACTION = re.compile(r"\.(\d+)")


def parse_timestamp(timestamp: str) -> datetime:
    """Parse an ISO-8601 log timestamp.

    Accepts a trailing "Z" and any number of fractional-second digits,
    which fromisoformat only handles natively from Python 3.11.

    Raises:
        ValueError: If the timestamp is not ISO-8601.
    """
    normalized = timestamp.replace("Z", "+00:00")
    normalized = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), normalized, count=1)
    return datetime.fromisoformat(normalized)


@dataclass
class ToolInvocation:
    """A single tool call recorded in a session log."""
    timestamp: str
    tool_name: str
    tool_input: dict = field(default_factory=dict)
    bash_command: Optional[str] = None
    bash_category: Optional[str] = None  # test, lint, format, build, git, install, typecheck, run, other
    file_path: Optional[str] = None
    tool_use_id: Optional[str] = None


@dataclass
class ToolResult:
    """Outcome of a tool call, taken from a tool_result block."""
    timestamp: str
    tool_use_id: str
    tool_name: str
    is_error: bool = False
    error_message: Optional[str] = None


@dataclass
class SessionInfo:
    """A session file found on disk."""
    session_id: str
    path: str
    project: str
    modified: float
    size_kb: float

    @property
    def start_time(self) -> str:
        return datetime.fromtimestamp(self.modified, tz=timezone.utc).isoformat()


@dataclass
class SessionData:
    """Parsed data from a Claude Code session."""
    session_id: str
    path: str = ""
    project: str = ""
    tool_invocations: list = field(default_factory=list)
    tool_results: list = field(default_factory=list)
    user_message_count: int = 0
    assistant_message_count: int = 0
    start_time: Optional[str] = None
    end_time: Optional[str] = None


@dataclass
class SessionMetrics:
    """Aggregate counts for one session."""
    session_id: str
    session_path: str
    project_name: str
    start_time: str
    end_time: str
    duration_minutes: float
    total_tool_calls: int
    error_count: int
    error_rate: float
    unique_tools_used: int
    user_message_count: int
    assistant_message_count: int
    tool_breakdown: dict = field(default_factory=dict)


@dataclass
class PatternDetectionOptions:
    """Options for n-gram pattern mining."""
    min_frequency: int = 2
    max_sequence_length: int = 5
    min_sequence_length: int = 2
    exclude_tools: list = field(default_factory=list)

    def validate(self) -> None:
        """Raise ValueError if the options cannot describe a mining run."""
        if self.min_frequency <= 0:
            raise ValueError(f"min_frequency must be positive, got {self.min_frequency}")
        if self.min_sequence_length < 1:
            raise ValueError(f"min_sequence_length must be at least 1, got {self.min_sequence_length}")
        if self.min_sequence_length > self.max_sequence_length:
            raise ValueError(
                f"min_sequence_length ({self.min_sequence_length}) exceeds "
                f"max_sequence_length ({self.max_sequence_length})"
            )


@dataclass
class PatternContext:
    """Where one occurrence of a pattern was seen."""
    session_id: str
    timestamp: str
    surrounding_tools: list = field(default_factory=list)
    bash_commands: list = field(default_factory=list)
    file_paths: list = field(default_factory=list)


@dataclass
class OperationPattern:
    """A recurring contiguous sequence of tool calls."""
    id: str
    sequence: list
    frequency: int
    contexts: list = field(default_factory=list)
    first_seen: str = ""
    last_seen: str = ""
    success_rate: float = 1.0
    category: Optional[str] = None
    common_commands: list = field(default_factory=list)
    common_file_paths: list = field(default_factory=list)

    @property
    def key(self) -> str:
        return SEQUENCE_SEPARATOR.join(self.sequence)


@dataclass
class PatternStats:
    """Summary statistics over a pattern collection."""
    total_patterns: int = 0
    average_frequency: float = 0
    average_sequence_length: float = 0
    most_common_tool: Optional[str] = None


@dataclass
class SkillStep:
    order: int
    action: str
    tool_name: Optional[str] = None


@dataclass
class SkillCandidate:
    """A reusable workflow synthesized from a recurring pattern."""
    id: str
    name: str
    description: str
    category: str
    trigger_conditions: list
    steps: list
    expected_frequency: int
    estimated_time_saved: str
    source_patterns: list
    related_files: list = field(default_factory=list)
    related_commands: list = field(default_factory=list)


@dataclass
class EfficiencyIssue:
    type: str  # high_error_rate, excessive_retries, inefficient_pattern, underutilized_tool
    severity: str  # low, medium, high
    description: str
    affected_sessions: list = field(default_factory=list)
    suggested_fix: Optional[str] = None


@dataclass
class Recommendation:
    id: str
    type: str  # pattern_optimization, tool_suggestion, workflow_improvement, skill_candidate
    priority: str
    title: str
    description: str
    expected_benefit: str
    related_patterns: list = field(default_factory=list)


@dataclass
class EfficiencyMetrics:
    error_rate: float = 0
    retry_rate: float = 0
    tool_diversity: int = 0
    average_tools_per_task: float = 0


@dataclass
class EfficiencyEvaluation:
    """Efficiency score with the issues and recommendations behind it."""
    overall_score: float
    metrics: EfficiencyMetrics
    issues: list = field(default_factory=list)
    recommendations: list = field(default_factory=list)


@dataclass
class AnalyzedPeriod:
    start: str
    end: str
    total_sessions: int


@dataclass
class AnalysisSummary:
    total_tool_calls: int
    total_errors: int
    overall_error_rate: float
    most_used_tools: list = field(default_factory=list)
    most_frequent_patterns: list = field(default_factory=list)
    top_recommendations: list = field(default_factory=list)


@dataclass
class AggregatedAnalysis:
    """Everything produced by one analysis run.

    Contains:
    - analyzed_period: Time span and number of sessions analyzed
    - session_metrics: Per-session counts
    - patterns: Recurring tool sequences
    - efficiency: Score, issues and recommendations
    - skill_candidates: Workflows worth turning into skills
    - summary: Headline numbers for reports
    """
    analyzed_period: AnalyzedPeriod
    session_metrics: list
    patterns: list
    efficiency: EfficiencyEvaluation
    skill_candidates: list
    summary: AnalysisSummary

    def to_dict(self) -> dict:
        return asdict(self)
