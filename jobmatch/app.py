import argparse
from pathlib import Path

from . import __version__
from .config import Settings, load_settings
from .database import get_session, init_database
from .env import load_env
from .errors import JobMatchError
from .explain import ExplanationGenerator
from .gemini import GeminiClient
from .logger import get_logger
from .matcher import MatchOrchestrator
from .repository import MatchRecordStore
from .seed import seed_from_json
from .skills import parse_skills
from .scoring import score_overlap
from .viewed import ViewedStateTracker

logger = get_logger()


def _db_path(args: argparse.Namespace, settings: Settings) -> Path:
    return Path(args.db) if getattr(args, "db", None) else settings.db_path


def _open_session(args: argparse.Namespace, settings: Settings):
    db_path = _db_path(args, settings)
    if not db_path.exists():
        raise SystemExit(f"Database not found: {db_path}. Run 'jobmatch init-db' first.")
    return get_session(db_path)


def _print_match(m, index: int = None) -> None:
    prefix = f"{index}. " if index is not None else ""
    title = f" ({m.job_title})" if m.job_title else ""
    seen = " [viewed]" if m.viewed else ""
    print(f"{prefix}{m.score:.1f}%  job={m.job_id}{title}  match={m.id}{seen}")


def cmd_init_db(args: argparse.Namespace, settings: Settings) -> None:
    db_path = _db_path(args, settings)
    init_database(db_path)
    print(f"Database ready: {db_path}")


def cmd_seed(args: argparse.Namespace, settings: Settings) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    counts = seed_from_json(input_path, _db_path(args, settings), dry_run=args.dry_run)
    label = "Would insert" if args.dry_run else "Inserted"
    print(
        f"{label}: candidates={counts['candidates']} resumes={counts['resumes']} "
        f"jobs={counts['jobs']} skipped={counts['skipped']}"
    )


def cmd_match(args: argparse.Namespace, settings: Settings) -> None:
    session = _open_session(args, settings)
    try:
        orchestrator = MatchOrchestrator.from_settings(settings, session)
        matches = orchestrator.compute_matches(args.candidate, min_score=args.min_score)
    finally:
        session.close()
    if not matches:
        print("No matches found.")
    else:
        print(f"Found {len(matches)} matches:\n")
        for i, m in enumerate(matches, 1):
            _print_match(m, i)
            if args.details:
                print(f"   {m.explanation}\n")
    logger.log_metrics_summary()


def cmd_list(args: argparse.Namespace, settings: Settings) -> None:
    session = _open_session(args, settings)
    try:
        orchestrator = MatchOrchestrator.from_settings(settings, session)
        matches = orchestrator.list_matches(args.candidate, min_score=args.min_score)
    finally:
        session.close()
    if not matches:
        print("No stored matches.")
        return
    for i, m in enumerate(matches, 1):
        _print_match(m, i)


def cmd_view(args: argparse.Namespace, settings: Settings) -> None:
    session = _open_session(args, settings)
    try:
        record = ViewedStateTracker(MatchRecordStore(session)).mark_viewed(args.match, args.candidate)
    finally:
        session.close()
    _print_match(record)
    print(record.explanation)


def cmd_analyze(args: argparse.Namespace, settings: Settings) -> None:
    candidate_skills = parse_skills(args.candidate_skills)
    job_skills = parse_skills(args.job_skills)
    overlap = score_overlap(job_skills, candidate_skills)
    print(f"Direct skill match: {len(overlap.matched)}/{len(job_skills)} ({overlap.percentage:.0f}%)")
    print(f"Matched: {', '.join(overlap.matched) or '-'}")
    print(f"Missing: {', '.join(overlap.missing) or '-'}")
    if args.ai:
        generator = ExplanationGenerator(GeminiClient.from_settings(settings))
        print()
        print(generator.analyze_skills(candidate_skills, job_skills))


def main(argv=None):
    # Load .env if present (GEMINI_API_KEY, JOBMATCH_DB, etc.)
    load_env()
    parser = argparse.ArgumentParser(prog="jobmatch", description="Rank job postings against a candidate profile")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--db", help="Path to SQLite database (default: $JOBMATCH_DB or data/jobmatch.db)")

    subparsers = parser.add_subparsers(dest="command")
    init = subparsers.add_parser("init-db", help="Create database tables")
    init.set_defaults(func=cmd_init_db)

    sd = subparsers.add_parser("seed", help="Load candidates and jobs from a JSON file")
    sd.add_argument("--input", required=True, help="Path to seed JSON")
    sd.add_argument("--dry-run", action="store_true", help="Count records without writing")
    sd.set_defaults(func=cmd_seed)

    mt = subparsers.add_parser("match", help="Score a candidate against all active jobs and store the results")
    mt.add_argument("--candidate", required=True, help="Candidate id")
    mt.add_argument("--min-score", type=float, help="Only show matches at or above this score")
    mt.add_argument("--details", action="store_true", help="Print the explanation for each match")
    mt.set_defaults(func=cmd_match)

    ls = subparsers.add_parser("list", help="List stored matches for a candidate")
    ls.add_argument("--candidate", required=True, help="Candidate id")
    ls.add_argument("--min-score", type=float, help="Only show matches at or above this score")
    ls.set_defaults(func=cmd_list)

    vw = subparsers.add_parser("view", help="Mark a match as viewed by its owner")
    vw.add_argument("--match", required=True, help="Match id")
    vw.add_argument("--candidate", required=True, help="Requesting candidate id")
    vw.set_defaults(func=cmd_view)

    an = subparsers.add_parser("analyze", help="Compare two skill lists")
    an.add_argument("--candidate-skills", required=True, help="Candidate skills, comma-separated")
    an.add_argument("--job-skills", required=True, help="Job required skills, comma-separated")
    an.add_argument("--ai", action="store_true", help="Also ask the AI collaborator for a gap analysis")
    an.set_defaults(func=cmd_analyze)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        settings = load_settings()
        try:
            args.func(args, settings)
        except JobMatchError as e:
            raise SystemExit(str(e))
        return

    parser.print_help()


if __name__ == "__main__":
    main()
