"""Command-line interface for skillminer."""

import argparse
import sys
from datetime import datetime
from pathlib import Path

from .parser import list_sessions, parse_session, resolve_session
from .analyzer import aggregate_analysis, DEFAULT_PATTERN_MIN_FREQUENCY, DEFAULT_PATTERN_MAX_LENGTH
from .drafter import draft_skill, DEFAULT_MODEL
from .renderer import render, FORMATS

DEFAULT_DAYS = 7
DEFAULT_SKILLS_DIR = "skills"


def main(argv=None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="skillminer",
        description="Find recurring workflows and inefficiencies in Claude Code sessions",
        epilog="""
Examples:
  skillminer analyze                 Analyze the last 7 days of sessions
  skillminer analyze -d 30 -f markdown
  skillminer analyze -s 17c072d8 -v  Analyze one session with details
  skillminer skills                  List skill candidates
  skillminer skills --draft          Draft SKILL.md files with Claude
  skillminer list                    Show available sessions
  skillminer help                    Show detailed help
""",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # analyze command
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze tool usage"
    )
    _add_session_arguments(analyze_parser)
    _add_pattern_arguments(analyze_parser)
    analyze_parser.add_argument(
        "-f", "--format",
        choices=FORMATS,
        default="text",
        help="Output format (default: text)"
    )
    analyze_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Include per-session details"
    )
    analyze_parser.add_argument(
        "--no-patterns",
        dest="patterns",
        action="store_false",
        help="Skip pattern detection"
    )
    analyze_parser.add_argument(
        "-o", "--output",
        metavar="FILE",
        help="Write the report to FILE instead of stdout"
    )

    # skills command
    skills_parser = subparsers.add_parser(
        "skills",
        help="List skill candidates"
    )
    _add_session_arguments(skills_parser)
    _add_pattern_arguments(skills_parser)
    skills_parser.add_argument(
        "--draft",
        action="store_true",
        help="Draft a SKILL.md for each candidate with Claude"
    )
    skills_parser.add_argument(
        "--model",
        default=DEFAULT_MODEL,
        help="Claude model for drafting"
    )
    skills_parser.add_argument(
        "-o", "--output",
        metavar="DIR",
        default=DEFAULT_SKILLS_DIR,
        help=f"Directory for drafted skills (default: {DEFAULT_SKILLS_DIR})"
    )

    # list command
    list_parser = subparsers.add_parser(
        "list",
        help="List available sessions"
    )
    list_parser.add_argument(
        "-p", "--project",
        metavar="PATH",
        help="Project path (defaults to all projects)"
    )
    list_parser.add_argument(
        "-d", "--days",
        type=int,
        metavar="N",
        help="Only sessions from the last N days"
    )

    # help command
    subparsers.add_parser(
        "help",
        help="Show detailed help"
    )

    args = parser.parse_args(argv)

    # Handle subcommands
    if args.command == "analyze":
        return cmd_analyze(args)
    elif args.command == "skills":
        return cmd_skills(args)
    elif args.command == "list":
        return cmd_list(args)
    elif args.command == "help":
        return cmd_help()
    else:
        parser.print_help()
        return 0


def _add_session_arguments(subparser) -> None:
    subparser.add_argument(
        "-s", "--session",
        metavar="ID",
        help="Session ID or path to a .jsonl file"
    )
    subparser.add_argument(
        "-p", "--project",
        metavar="PATH",
        help="Project path (defaults to all projects)"
    )
    subparser.add_argument(
        "-d", "--days",
        type=int,
        default=DEFAULT_DAYS,
        metavar="N",
        help=f"Analyze sessions from the last N days (default: {DEFAULT_DAYS})"
    )


def _add_pattern_arguments(subparser) -> None:
    subparser.add_argument(
        "--min-frequency",
        type=int,
        default=DEFAULT_PATTERN_MIN_FREQUENCY,
        metavar="N",
        help=f"Minimum pattern frequency (default: {DEFAULT_PATTERN_MIN_FREQUENCY})"
    )
    subparser.add_argument(
        "--max-length",
        type=int,
        default=DEFAULT_PATTERN_MAX_LENGTH,
        metavar="N",
        help=f"Maximum pattern length (default: {DEFAULT_PATTERN_MAX_LENGTH})"
    )
    subparser.add_argument(
        "--per-session",
        action="store_true",
        help="Mine each session separately and merge the patterns"
    )


def load_sessions(args) -> list:
    """Parse the sessions selected by --session, --project and --days."""
    if args.session:
        if "/" in args.session or args.session.endswith(".jsonl"):
            session_path = Path(args.session)
            if not session_path.exists():
                return []
            return [parse_session(session_path)]

        info = resolve_session(args.session, args.project)
        if not info:
            return []
        return [parse_session(Path(info.path), project=info.project)]

    sessions = list_sessions(args.project, days=args.days)
    return [parse_session(Path(s.path), project=s.project) for s in sessions]


def _run_analysis(args):
    """Load sessions and analyze them. Returns None after reporting a problem."""
    sessions = load_sessions(args)
    if not sessions:
        if args.session:
            print(f"Error: Session not found: {args.session}", file=sys.stderr)
        else:
            print("Error: No sessions found in the specified period", file=sys.stderr)
        print("Use 'skillminer list' to see available sessions", file=sys.stderr)
        return None

    print(f"Analyzing {len(sessions)} session(s)...", file=sys.stderr)

    try:
        return aggregate_analysis(
            sessions,
            include_patterns=getattr(args, "patterns", True),
            pattern_min_frequency=args.min_frequency,
            pattern_max_length=args.max_length,
            per_session=args.per_session
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None


def cmd_analyze(args) -> int:
    """Analyze sessions and print a report."""
    analysis = _run_analysis(args)
    if analysis is None:
        return 1

    print(
        f"Found {len(analysis.patterns)} patterns, "
        f"{len(analysis.skill_candidates)} skill candidates",
        file=sys.stderr
    )

    output = render(analysis, args.format, verbose=args.verbose)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output)
        print(f"Written to {args.output}", file=sys.stderr)
    else:
        print(output)

    return 0


def cmd_skills(args) -> int:
    """List skill candidates, optionally drafting SKILL.md files."""
    analysis = _run_analysis(args)
    if analysis is None:
        return 1

    candidates = analysis.skill_candidates
    if not candidates:
        print("No skill candidates found", file=sys.stderr)
        return 0

    print("Skill candidates:\n")
    for i, skill in enumerate(candidates, 1):
        print(f"  {i}. {skill.name} ({skill.expected_frequency}x)")
        print(f"     {skill.description}")

    if not args.draft:
        return 0

    output_dir = Path(args.output)
    written = 0
    for skill in candidates:
        document = draft_skill(skill, model=args.model)
        if not document:
            continue
        skill_dir = output_dir / skill.name
        skill_dir.mkdir(parents=True, exist_ok=True)
        (skill_dir / "SKILL.md").write_text(document, encoding="utf-8")
        written += 1
        print(f"Written to {skill_dir / 'SKILL.md'}", file=sys.stderr)

    return 0 if written else 1


def cmd_list(args) -> int:
    """List available sessions."""
    sessions = list_sessions(args.project, days=args.days)

    if not sessions:
        print("No sessions found", file=sys.stderr)
        return 1

    print("Sessions:\n")
    for i, s in enumerate(sessions, 1):
        mtime = datetime.fromtimestamp(s.modified)
        print(f"  {i}. {s.session_id[:8]}  {s.project}")
        print(f"     {mtime.strftime('%Y-%m-%d %H:%M')} | {s.size_kb:.1f}KB")

    return 0


def cmd_help() -> int:
    """Show detailed help."""
    help_text = f"""
SKILLMINER - Find the workflows you repeat in Claude Code

COMMANDS
  skillminer analyze [options]   Report on tool usage, patterns and efficiency
  skillminer skills [options]    List skill candidates (and draft them)
  skillminer list [options]      List available sessions
  skillminer help                Show this help

SESSION OPTIONS (analyze, skills)
  -s, --session ID     Use one session (ID prefix or .jsonl path)
  -p, --project PATH   Only sessions of this project
  -d, --days N         Sessions from the last N days (default: {DEFAULT_DAYS})

PATTERN OPTIONS (analyze, skills)
  --min-frequency N    Minimum occurrences of a pattern (default: {DEFAULT_PATTERN_MIN_FREQUENCY})
  --max-length N       Longest tool sequence to mine (default: {DEFAULT_PATTERN_MAX_LENGTH})
  --per-session        Mine sessions separately, then merge

ANALYZE OPTIONS
  -f, --format FMT     text, json or markdown (default: text)
  -v, --verbose        Include per-session details
  --no-patterns        Skip pattern detection
  -o, --output FILE    Write the report to FILE

SKILLS OPTIONS
  --draft              Draft SKILL.md files with Claude
  --model MODEL        Claude model (default: {DEFAULT_MODEL})
  -o, --output DIR     Where drafts go (default: {DEFAULT_SKILLS_DIR}/<name>/SKILL.md)

EFFICIENCY SCORE
  Starts at 100. Error rate costs up to 30 points, retry rate
  (repeated Edit/Write on the same file) up to 20.

ENVIRONMENT
  ANTHROPIC_API_KEY    Required for --draft.
"""
    print(help_text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
