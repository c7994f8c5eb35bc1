"""Detect recurring tool-call sequences with n-gram mining.

Pipeline:
    extract_sequence  -> drop excluded tools and malformed records
    detect_patterns   -> count n-grams, keep frequent ones, suppress sub-patterns
    (enrichment)      -> timestamps, surrounding tools, common commands/paths, category

All functions are pure: they never mutate their inputs.
"""

from collections import Counter
from dataclasses import replace
from typing import Optional

from .models import (
    OperationPattern,
    PatternContext,
    PatternDetectionOptions,
    PatternStats,
    parse_timestamp,
)

# Tools to record on each side of an occurrence
CONTEXT_SIZE = 2

# How many common commands / file paths to keep per pattern
TOP_ITEMS_LIMIT = 5

AGGREGATE_SESSION_ID = "aggregate"


def _is_valid_timestamp(timestamp) -> bool:
    if not isinstance(timestamp, str) or not timestamp:
        return False
    try:
        parse_timestamp(timestamp)
    except ValueError:
        return False
    return True


def extract_sequence(invocations: list, exclude_tools: Optional[list] = None) -> list:
    """Return the invocations that take part in mining, in their original order.

    Invocations of excluded tools are dropped. So are malformed records (no
    tool name, or a timestamp that is not ISO-8601); the rest are kept.
    """
    excluded = set(exclude_tools or [])
    return [
        inv for inv in invocations
        if inv.tool_name
        and inv.tool_name not in excluded
        and _is_valid_timestamp(inv.timestamp)
    ]


def _surrounding_tools(sequence: list, start: int, length: int) -> list:
    """Tool names just before and just after a window, clipped at the bounds."""
    before = sequence[max(0, start - CONTEXT_SIZE):start]
    after = sequence[start + length:start + length + CONTEXT_SIZE]
    return [inv.tool_name for inv in before + after]


def _top_items(items: list, limit: int = TOP_ITEMS_LIMIT) -> list:
    # most_common keeps first-seen order among equal counts
    return [item for item, _ in Counter(items).most_common(limit)]


def _most_frequent(items: list) -> Optional[str]:
    if not items:
        return None
    return Counter(items).most_common(1)[0][0]


def _contains_sublist(haystack: tuple, needle: tuple) -> bool:
    n = len(needle)
    return any(haystack[i:i + n] == needle for i in range(len(haystack) - n + 1))


def _suppress_subpatterns(keys: list) -> list:
    """Drop every key that is a contiguous run inside another kept key."""
    kept = []
    for key in keys:
        is_subpattern = any(
            other != key and len(other) > len(key) and _contains_sublist(other, key)
            for other in keys
        )
        if not is_subpattern:
            kept.append(key)
    return kept


def detect_patterns(invocations: list, options: PatternDetectionOptions) -> list:
    """Find tool sequences that recur at least ``options.min_frequency`` times.

    Every window length from min_sequence_length to max_sequence_length is
    counted. A frequent sequence that sits inside a longer frequent sequence
    is dropped in favour of the longer one.

    Args:
        invocations: Tool calls in the order they happened.
        options: Mining thresholds; validated before any work is done.

    Returns:
        OperationPattern list sorted by frequency, highest first. Equal
        frequencies keep first-encounter order.

    Raises:
        ValueError: If the options are inconsistent.
    """
    options.validate()

    sequence = extract_sequence(invocations, options.exclude_tools)
    if len(sequence) < options.min_sequence_length:
        return []

    names = [inv.tool_name for inv in sequence]

    # key -> list of window start indices, in first-encounter order
    occurrences = {}
    for n in range(options.min_sequence_length, options.max_sequence_length + 1):
        for i in range(len(names) - n + 1):
            occurrences.setdefault(tuple(names[i:i + n]), []).append(i)

    frequent = [key for key, starts in occurrences.items() if len(starts) >= options.min_frequency]

    patterns = []
    for pattern_id, key in enumerate(_suppress_subpatterns(frequent), 1):
        patterns.append(_build_pattern(f"pattern-{pattern_id}", key, occurrences[key], sequence))

    return sorted(patterns, key=lambda p: p.frequency, reverse=True)


def _build_pattern(pattern_id: str, key: tuple, starts: list, sequence: list) -> OperationPattern:
    """Aggregate the occurrences of one pattern into an OperationPattern."""
    length = len(key)
    contexts = []
    all_commands = []
    all_paths = []
    all_categories = []

    for start in starts:
        window = sequence[start:start + length]
        commands = [inv.bash_command for inv in window if inv.bash_command]
        paths = [inv.file_path for inv in window if inv.file_path]

        all_commands.extend(commands)
        all_paths.extend(paths)
        all_categories.extend(inv.bash_category for inv in window if inv.bash_category)

        contexts.append(PatternContext(
            session_id=AGGREGATE_SESSION_ID,
            timestamp=window[0].timestamp,
            surrounding_tools=_surrounding_tools(sequence, start, length),
            bash_commands=commands,
            file_paths=paths
        ))

    timestamps = [c.timestamp for c in contexts]

    return OperationPattern(
        id=pattern_id,
        sequence=list(key),
        frequency=len(starts),
        contexts=contexts,
        first_seen=min(timestamps),
        last_seen=max(timestamps),
        # No per-occurrence outcome is available here
        success_rate=1.0,
        category=_most_frequent(all_categories),
        common_commands=_top_items(all_commands),
        common_file_paths=_top_items(all_paths)
    )


def merge_patterns(pattern_sets: list) -> list:
    """Combine patterns mined from independent sources.

    Patterns with the same sequence are folded together: frequencies are
    summed, contexts concatenated and the first/last seen range widened.
    The inputs are left untouched.
    """
    merged = {}

    for patterns in pattern_sets:
        for pattern in patterns:
            existing = merged.get(pattern.key)
            if existing is None:
                merged[pattern.key] = replace(
                    pattern,
                    sequence=list(pattern.sequence),
                    contexts=list(pattern.contexts)
                )
                continue

            existing.frequency += pattern.frequency
            existing.contexts.extend(pattern.contexts)
            if pattern.first_seen < existing.first_seen:
                existing.first_seen = pattern.first_seen
            if pattern.last_seen > existing.last_seen:
                existing.last_seen = pattern.last_seen

    return sorted(merged.values(), key=lambda p: p.frequency, reverse=True)


def find_pattern(invocations: list, target_sequence: list) -> list:
    """Locate every occurrence of a tool sequence.

    Returns:
        List of dicts with start_index and timestamp.
    """
    target = tuple(target_sequence)
    n = len(target)
    if n == 0:
        return []

    names = tuple(inv.tool_name for inv in invocations)
    return [
        {"start_index": i, "timestamp": invocations[i].timestamp}
        for i in range(len(names) - n + 1)
        if names[i:i + n] == target
    ]


def calculate_pattern_stats(patterns: list) -> PatternStats:
    """Count, mean frequency, mean length and the most common tool of a pattern set.

    The most common tool is weighted by pattern frequency; ties go to the
    tool encountered first.
    """
    if not patterns:
        return PatternStats()

    tool_counts = Counter()
    for pattern in patterns:
        for tool in pattern.sequence:
            tool_counts[tool] += pattern.frequency

    return PatternStats(
        total_patterns=len(patterns),
        average_frequency=sum(p.frequency for p in patterns) / len(patterns),
        average_sequence_length=sum(len(p.sequence) for p in patterns) / len(patterns),
        most_common_tool=tool_counts.most_common(1)[0][0] if tool_counts else None
    )
