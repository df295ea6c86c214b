"""Handler for 'kan doctor'."""

import logging

from kan.cli._common import error, output_json
from kan.discovery import discover_project
from kan.doctor import SEVERITY_ERROR, DiagnosticReport, Doctor, Issue
from kan.errors import Corrupt, StaleReference, UnsupportedVersion
from kan.paths import Paths, canonical_path
from kan.store import FileGlobalStore

logger = logging.getLogger(__name__)


def _doctor_paths(root: str, global_store: FileGlobalStore) -> Paths:
    """Locate the project even when the global config is broken or stale.

    The doctor reports those problems itself, so they must not stop it here.
    """
    try:
        global_config = global_store.load()
    except (Corrupt, UnsupportedVersion) as e:
        logger.warning("Ignoring global config during discovery: %s", e)
        global_config = None
    try:
        project = discover_project(root, global_config)
    except StaleReference as e:
        logger.warning("%s", e)
        project = discover_project(root, None)
    if project is None:
        return Paths(canonical_path(root))
    return Paths(project.root, project.data_location)


def _print_issue(issue: Issue) -> None:
    location = ""
    if issue.board:
        location = f" {issue.board}"
        if issue.card_id:
            location += f"/{issue.card_id}"
    print(f"[{issue.code}]{location} {issue.message}")
    if issue.fix_error:
        print(f"  → Fix failed: {issue.fix_error}")
    elif issue.fix_action:
        print(f"  → Fix: {issue.fix_action}")


def print_report(report: DiagnosticReport, did_fix: bool, dry_run: bool) -> None:
    for board in report.boards:
        print(f'Checking board "{board.name}"...')
        print(f"  Cards: {board.card_files} files, {board.cards_referenced} referenced")
        print(f"  Columns: {board.columns}")
        print()

    if not report.boards:
        print("No boards found")
        print()

    fixed = report.summary.fixed if did_fix else 0
    if fixed:
        print(f"Fixed {fixed} issue(s)")
        print()

    fixable = sum(1 for i in report.issues if i.fixable)
    if dry_run and fixable:
        print(f"Dry run: {fixable} issue(s) would be fixed")
        print()

    if not report.issues:
        print("All issues resolved" if fixed else "No issues found")
        return

    for issue in sorted(report.issues, key=lambda i: i.severity != SEVERITY_ERROR):
        _print_issue(issue)

    parts = []
    if report.summary.errors:
        parts.append(f"{report.summary.errors} error(s)")
    if report.summary.warnings:
        parts.append(f"{report.summary.warnings} warning(s)")
    if fixed:
        parts.append(f"{fixed} fixed")
    if report.summary.fix_failed:
        parts.append(f"{report.summary.fix_failed} fix failed")
    print()
    print(f"Summary: {', '.join(parts)}")

    if not did_fix and fixable:
        print()
        if dry_run:
            print("Run 'kan doctor --fix' to apply these fixes")
        else:
            print("Run 'kan doctor --fix' to apply automatic fixes")


def doctor(args) -> int:
    """Check data consistency. Exit 0 if healthy, 1 if errors remain."""
    if args.fix and args.dry_run:
        error("--fix and --dry-run cannot be used together", args.json)

    global_store = FileGlobalStore()
    engine = Doctor(_doctor_paths(args.root, global_store), global_store)
    report = engine.diagnose(args.board)
    if args.fix and report.issues:
        report = engine.fix(report)

    if args.json:
        output_json(report.to_dict())
    else:
        print_report(report, did_fix=args.fix, dry_run=args.dry_run)

    return 1 if report.has_errors else 0
