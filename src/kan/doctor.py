"""Consistency checks and repairs for kan data.

``Doctor.diagnose`` reads the global config and every board directly from
disk and reports what it finds as ``Issue`` records without changing
anything. ``Doctor.fix`` applies the deterministic repairs, one file at a
time, and then diagnoses again so the returned report shows what is left.
Problems that have no single correct answer (two cards claiming the same
explicit alias, a file that does not parse) are reported but never fixed.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from pathlib import Path

from kan import migrate
from kan.constants import (
    BOARDS_DIR,
    CARD_SUFFIX,
    CURRENT_BOARD_VERSION,
    CURRENT_CARD_VERSION,
    CURRENT_GLOBAL_VERSION,
    DEFAULT_DATA_DIR,
)
from kan.errors import Corrupt, FixFailed, KanError, NotFound, UnsupportedVersion
from kan.fileio import is_temp_file, read_text
from kan.models import BoardConfig, Card
from kan.paths import Paths, canonical_path
from kan.store import FileBoardStore, FileCardStore, FileGlobalStore

logger = logging.getLogger(__name__)

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"

MALFORMED_GLOBAL_CONFIG = "MALFORMED_GLOBAL_CONFIG"
GLOBAL_SCHEMA_OUTDATED = "GLOBAL_SCHEMA_OUTDATED"
UNSUPPORTED_GLOBAL_SCHEMA = "UNSUPPORTED_GLOBAL_SCHEMA"
STALE_REPO_ENTRY = "STALE_REPO_ENTRY"
NON_CANONICAL_REPO_PATH = "NON_CANONICAL_REPO_PATH"
MALFORMED_BOARD_CONFIG = "MALFORMED_BOARD_CONFIG"
UNSUPPORTED_BOARD_SCHEMA = "UNSUPPORTED_BOARD_SCHEMA"
SCHEMA_OUTDATED = "SCHEMA_OUTDATED"
DUPLICATE_COLUMN = "DUPLICATE_COLUMN"
INVALID_DEFAULT_COLUMN = "INVALID_DEFAULT_COLUMN"
MALFORMED_CARD = "MALFORMED_CARD"
UNSUPPORTED_CARD_VERSION = "UNSUPPORTED_CARD_VERSION"
CARD_SCHEMA_OUTDATED = "CARD_SCHEMA_OUTDATED"
CARD_ID_MISMATCH = "CARD_ID_MISMATCH"
INVALID_COLUMN_REF = "INVALID_COLUMN_REF"
NO_FALLBACK_COLUMN = "NO_FALLBACK_COLUMN"
DUPLICATE_ALIAS = "DUPLICATE_ALIAS"
INVALID_PARENT_REF = "INVALID_PARENT_REF"
STALE_TEMP_FILE = "STALE_TEMP_FILE"


@dataclass
class Issue:
    """One problem found by diagnose()."""

    severity: str
    code: str
    message: str
    board: str = ""
    card_id: str = ""
    fixable: bool = False
    fix_action: str = ""
    fix_error: str = ""
    fix_context: dict[str, str] = field(default_factory=dict)

    def key(self) -> tuple:
        """Identity used to match an issue across diagnose runs."""
        return (self.code, self.board, self.card_id, tuple(sorted(self.fix_context.items())))

    def to_dict(self) -> dict:
        data = {"severity": self.severity, "code": self.code}
        if self.board:
            data["board"] = self.board
        if self.card_id:
            data["card_id"] = self.card_id
        data["message"] = self.message
        data["fixable"] = self.fixable
        if self.fix_action:
            data["fix_action"] = self.fix_action
        if self.fix_error:
            data["fix_error"] = self.fix_error
        if self.fix_context:
            data["fix_context"] = dict(self.fix_context)
        return data


@dataclass
class BoardDiagnostic:
    name: str
    card_files: int = 0
    cards_referenced: int = 0
    columns: int = 0


@dataclass
class ReportSummary:
    errors: int = 0
    warnings: int = 0
    fixed: int = 0
    fix_failed: int = 0


@dataclass
class DiagnosticReport:
    boards: list[BoardDiagnostic] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)
    summary: ReportSummary = field(default_factory=ReportSummary)
    board_filter: str | None = None

    @property
    def has_errors(self) -> bool:
        return self.summary.errors > 0

    def recount(self) -> None:
        self.summary.errors = sum(1 for i in self.issues if i.severity == SEVERITY_ERROR)
        self.summary.warnings = sum(1 for i in self.issues if i.severity == SEVERITY_WARNING)

    def to_dict(self) -> dict:
        return {
            "boards": [
                {
                    "name": b.name,
                    "card_files": b.card_files,
                    "cards_referenced": b.cards_referenced,
                    "columns": b.columns,
                }
                for b in self.boards
            ],
            "issues": [i.to_dict() for i in self.issues],
            "summary": {
                "errors": self.summary.errors,
                "warnings": self.summary.warnings,
                "fixed": self.summary.fixed,
                "fix_failed": self.summary.fix_failed,
            },
        }


def _duplicates(names: list[str]) -> list[str]:
    """Names occurring more than once, in order of first appearance."""
    seen = set()
    dupes = []
    for name in names:
        if name in seen and name not in dupes:
            dupes.append(name)
        seen.add(name)
    return dupes


class Doctor:
    """Diagnose and repair one project's data plus the global config."""

    def __init__(self, paths: Paths, global_store=None):
        self.paths = paths
        self.global_store = global_store if global_store is not None else FileGlobalStore()
        self.cards = FileCardStore(paths)
        self.boards = FileBoardStore(paths)
        self._fixers: dict[str, Callable[[Issue], None]] = {
            GLOBAL_SCHEMA_OUTDATED: self._fix_global_schema,
            STALE_REPO_ENTRY: self._fix_stale_repo,
            NON_CANONICAL_REPO_PATH: self._fix_non_canonical_repo,
            SCHEMA_OUTDATED: self._fix_board_schema,
            DUPLICATE_COLUMN: self._fix_duplicate_column,
            INVALID_DEFAULT_COLUMN: self._fix_default_column,
            STALE_TEMP_FILE: self._fix_temp_file,
            CARD_ID_MISMATCH: self._fix_card_id,
            CARD_SCHEMA_OUTDATED: self._fix_card_schema,
            INVALID_COLUMN_REF: self._fix_column_ref,
            INVALID_PARENT_REF: self._fix_parent_ref,
        }

    # --- Diagnose ---

    def diagnose(self, board: str | None = None) -> DiagnosticReport:
        """Check the global config and every board, or only the named board."""
        report = DiagnosticReport(board_filter=board)
        self._check_global(report)

        if board is not None:
            if not self.paths.board_dir(board).is_dir():
                raise NotFound("board", board)
            names = [board]
        elif self.paths.boards_root.is_dir():
            names = sorted(d.name for d in self.paths.boards_root.iterdir() if d.is_dir())
        else:
            names = []

        for name in names:
            self._check_board(report, name)
        report.recount()
        return report

    def _add(self, report: DiagnosticReport, severity: str, code: str, message: str, **kwargs) -> None:
        report.issues.append(Issue(severity=severity, code=code, message=message, **kwargs))

    def _check_global(self, report: DiagnosticReport) -> None:
        try:
            config = self.global_store.load()
        except UnsupportedVersion as e:
            self._add(report, SEVERITY_ERROR, UNSUPPORTED_GLOBAL_SCHEMA, str(e))
            return
        except Corrupt as e:
            self._add(report, SEVERITY_WARNING, MALFORMED_GLOBAL_CONFIG, f"Cannot read global config: {e}")
            return

        if config.version < CURRENT_GLOBAL_VERSION:
            self._add(
                report,
                SEVERITY_WARNING,
                GLOBAL_SCHEMA_OUTDATED,
                f"Global config has schema global/{config.version}, current is global/{CURRENT_GLOBAL_VERSION}",
                fixable=True,
                fix_action=f"Rewrite global config at global/{CURRENT_GLOBAL_VERSION}",
            )

        for repo_path in sorted(config.repos):
            repo = config.repos[repo_path]
            data_dir = Path(repo_path) / (repo.data_location or DEFAULT_DATA_DIR)
            if not (data_dir / BOARDS_DIR).is_dir():
                self._add(
                    report,
                    SEVERITY_ERROR,
                    STALE_REPO_ENTRY,
                    f"Global config references {repo_path} but kan data not found at {data_dir}",
                    fixable=True,
                    fix_action="Remove the entry from the global config",
                    fix_context={"repo": repo_path},
                )
                continue
            canonical = canonical_path(repo_path)
            if canonical != repo_path:
                collides = canonical in config.repos
                self._add(
                    report,
                    SEVERITY_WARNING,
                    NON_CANONICAL_REPO_PATH,
                    f"Repository path {repo_path} is not canonical (resolves to {canonical})",
                    fixable=not collides,
                    fix_action="" if collides else f"Rewrite key as {canonical}",
                    fix_context={"repo": repo_path, "canonical": canonical},
                )

    def _check_board(self, report: DiagnosticReport, name: str) -> None:
        diag = BoardDiagnostic(name=name)
        report.boards.append(diag)

        board = self._read_board(report, name)
        if board is None:
            return
        diag.columns = len(board.columns)

        if board.version < CURRENT_BOARD_VERSION:
            self._add(
                report,
                SEVERITY_WARNING,
                SCHEMA_OUTDATED,
                f"Board has schema board/{board.version}, current is board/{CURRENT_BOARD_VERSION}",
                board=name,
                fixable=True,
                fix_action=f"Rewrite config at board/{CURRENT_BOARD_VERSION}",
            )

        names = board.column_names()
        for column in _duplicates(names):
            self._add(
                report,
                SEVERITY_ERROR,
                DUPLICATE_COLUMN,
                f"Column '{column}' is defined {names.count(column)} times",
                board=name,
                fixable=True,
                fix_action="Keep the first definition, drop the others",
                fix_context={"column": column},
            )

        if board.default_column and not board.has_column(board.default_column):
            if board.columns:
                fix_action = f"Reset to first column ({board.columns[0].name})"
            else:
                fix_action = "Clear default_column (no columns exist)"
            self._add(
                report,
                SEVERITY_WARNING,
                INVALID_DEFAULT_COLUMN,
                f"default_column '{board.default_column}' does not exist",
                board=name,
                fixable=True,
                fix_action=fix_action,
            )

        self._check_temp_files(report, name)
        self._check_cards(report, diag, board)

    def _read_board(self, report: DiagnosticReport, name: str) -> BoardConfig | None:
        path = self.paths.board_config_path(name)
        try:
            return migrate.decode_board(read_text(path), path)
        except FileNotFoundError:
            self._add(report, SEVERITY_ERROR, MALFORMED_BOARD_CONFIG, "Board directory has no config.toml", board=name)
        except UnsupportedVersion as e:
            self._add(report, SEVERITY_ERROR, UNSUPPORTED_BOARD_SCHEMA, str(e), board=name)
        except Corrupt as e:
            self._add(report, SEVERITY_ERROR, MALFORMED_BOARD_CONFIG, f"Cannot read board config: {e.reason}", board=name)
        return None

    def _check_temp_files(self, report: DiagnosticReport, name: str) -> None:
        for directory in (self.paths.board_dir(name), self.paths.cards_dir(name)):
            if not directory.is_dir():
                continue
            for path in sorted(directory.iterdir()):
                if path.is_file() and is_temp_file(path.name):
                    self._add(
                        report,
                        SEVERITY_WARNING,
                        STALE_TEMP_FILE,
                        f"Leftover temporary file from an interrupted write: {path.name}",
                        board=name,
                        fixable=True,
                        fix_action="Delete the temporary file",
                        fix_context={"path": str(path)},
                    )

    def _card_files(self, name: str) -> list[Path]:
        cards_dir = self.paths.cards_dir(name)
        if not cards_dir.is_dir():
            return []
        return sorted(
            p for p in cards_dir.iterdir() if p.is_file() and p.suffix == CARD_SUFFIX and not is_temp_file(p.name)
        )

    def _check_cards(self, report: DiagnosticReport, diag: BoardDiagnostic, board: BoardConfig) -> None:
        name = diag.name
        files = self._card_files(name)
        diag.card_files = len(files)
        stems = {p.stem for p in files}
        explicit: dict[str, list[str]] = {}

        for path in files:
            card_id = path.stem
            try:
                card = migrate.decode_card(read_text(path), path)
            except UnsupportedVersion as e:
                self._add(report, SEVERITY_ERROR, UNSUPPORTED_CARD_VERSION, str(e), board=name, card_id=card_id)
                continue
            except Corrupt as e:
                self._add(
                    report, SEVERITY_ERROR, MALFORMED_CARD, f"Cannot read card file: {e.reason}", board=name, card_id=card_id
                )
                continue

            if card.id != card_id:
                self._add(
                    report,
                    SEVERITY_ERROR,
                    CARD_ID_MISMATCH,
                    f"Card file {path.name} has id '{card.id}'",
                    board=name,
                    card_id=card_id,
                    fixable=True,
                    fix_action=f"Set id to {card_id}",
                )

            if card.version < CURRENT_CARD_VERSION:
                self._add(
                    report,
                    SEVERITY_WARNING,
                    CARD_SCHEMA_OUTDATED,
                    f"Card has _v={card.version}, current is {CURRENT_CARD_VERSION}",
                    board=name,
                    card_id=card_id,
                    fixable=True,
                    fix_action=f"Rewrite card at version {CURRENT_CARD_VERSION}",
                )

            if board.has_column(card.column):
                diag.cards_referenced += 1
            else:
                self._check_column_ref(report, board, name, card_id, card)

            if card.parent and card.parent not in stems:
                self._add(
                    report,
                    SEVERITY_WARNING,
                    INVALID_PARENT_REF,
                    f"Parent '{card.parent}' does not exist",
                    board=name,
                    card_id=card_id,
                    fixable=True,
                    fix_action="Clear parent field",
                )

            if card.alias and card.alias_explicit:
                explicit.setdefault(card.alias, []).append(card_id)

        for alias, card_ids in explicit.items():
            if len(card_ids) > 1:
                self._add(
                    report,
                    SEVERITY_ERROR,
                    DUPLICATE_ALIAS,
                    f"Alias '{alias}' is set explicitly on {len(card_ids)} cards: {', '.join(card_ids)}",
                    board=name,
                    fix_context={"alias": alias, "cards": ",".join(card_ids)},
                )

    def _check_column_ref(self, report: DiagnosticReport, board: BoardConfig, name: str, card_id: str, card: Card) -> None:
        target = board.effective_default_column()
        if target is None:
            self._add(
                report,
                SEVERITY_ERROR,
                NO_FALLBACK_COLUMN,
                f"Column '{card.column}' does not exist and the board has no column to move the card to",
                board=name,
                card_id=card_id,
            )
            return
        self._add(
            report,
            SEVERITY_ERROR,
            INVALID_COLUMN_REF,
            f"Column '{card.column}' does not exist",
            board=name,
            card_id=card_id,
            fixable=True,
            fix_action=f"Reassign to {target}",
            fix_context={"column": target},
        )

    # --- Fix ---

    def fix(self, report: DiagnosticReport) -> DiagnosticReport:
        """Apply every fixable issue in report order, then diagnose again.

        A failed fix is logged and recorded on the issue; the rest still run.
        """
        fixed = 0
        failures: list[Issue] = []
        for issue in report.issues:
            if not issue.fixable:
                continue
            try:
                self._fixers[issue.code](issue)
            except (KanError, OSError) as e:
                logger.warning("Could not fix %s (%s): %s", issue.code, issue.board or "global", e)
                failures.append(replace(issue, fix_error=str(e)))
            else:
                logger.info("Fixed %s (%s): %s", issue.code, issue.board or "global", issue.fix_action)
                fixed += 1

        fresh = self.diagnose(report.board_filter)
        for failed in failures:
            match = next((i for i in fresh.issues if i.key() == failed.key()), None)
            if match is not None:
                match.fix_error = failed.fix_error
            else:
                fresh.issues.append(failed)
        fresh.summary.fixed = fixed
        fresh.summary.fix_failed = len(failures)
        fresh.recount()
        return fresh

    def _load_board(self, name: str) -> BoardConfig:
        path = self.paths.board_config_path(name)
        return migrate.decode_board(read_text(path), path)

    def _rewrite_card(self, board: str, card_id: str, change: Callable[[Card], None]) -> None:
        path = self.paths.card_path(board, card_id)
        card = migrate.decode_card(read_text(path), path)
        if card.id != card_id:
            raise FixFailed(f"card file {path.name} has id '{card.id}'; fix the id first")
        change(card)
        self.cards.save(board, card)

    def _fix_global_schema(self, issue: Issue) -> None:
        self.global_store.save(self.global_store.load())

    def _fix_stale_repo(self, issue: Issue) -> None:
        config = self.global_store.load()
        if config.remove_repo(issue.fix_context["repo"]):
            self.global_store.save(config)

    def _fix_non_canonical_repo(self, issue: Issue) -> None:
        old, canonical = issue.fix_context["repo"], issue.fix_context["canonical"]
        config = self.global_store.load()
        if canonical in config.repos:
            raise FixFailed(f"global config already has an entry for {canonical}")
        repo = config.repos.pop(old, None)
        if repo is None:
            return
        config.set_repo(canonical, repo)
        self.global_store.save(config)

    def _fix_board_schema(self, issue: Issue) -> None:
        self.boards.save(self._load_board(issue.board))

    def _fix_duplicate_column(self, issue: Issue) -> None:
        board = self._load_board(issue.board)
        kept = []
        for column in board.columns:
            if column.name not in [c.name for c in kept]:
                kept.append(column)
        for position, column in enumerate(kept):
            column.position = position
        board.columns = kept
        self.boards.save(board)

    def _fix_default_column(self, issue: Issue) -> None:
        board = self._load_board(issue.board)
        board.default_column = board.columns[0].name if board.columns else ""
        self.boards.save(board)

    def _fix_temp_file(self, issue: Issue) -> None:
        Path(issue.fix_context["path"]).unlink(missing_ok=True)

    def _fix_card_id(self, issue: Issue) -> None:
        path = self.paths.card_path(issue.board, issue.card_id)
        card = migrate.decode_card(read_text(path), path)
        card.id = issue.card_id
        self.cards.save(issue.board, card)

    def _fix_card_schema(self, issue: Issue) -> None:
        self._rewrite_card(issue.board, issue.card_id, lambda card: None)

    def _fix_column_ref(self, issue: Issue) -> None:
        target = issue.fix_context["column"]
        if not self._load_board(issue.board).has_column(target):
            raise FixFailed(f"column '{target}' no longer exists")

        def change(card: Card) -> None:
            card.column = target

        self._rewrite_card(issue.board, issue.card_id, change)

    def _fix_parent_ref(self, issue: Issue) -> None:
        def change(card: Card) -> None:
            card.parent = ""

        self._rewrite_card(issue.board, issue.card_id, change)
