"""Turn what the user typed into a board name or a card."""

from collections.abc import Callable

from kan.errors import AmbiguousBoard, NotFound
from kan.models import Card

Prompter = Callable[[str, list[str]], str]


class CardResolver:
    """Find a card by ID or alias."""

    def __init__(self, cards):
        self.cards = cards

    def resolve(self, board: str, ident: str) -> Card:
        """Exact ID first, then explicit aliases, then auto aliases."""
        if self.cards.exists(board, ident):
            return self.cards.get(board, ident)
        matches = self.cards.find_by_alias(board, ident)
        for card in matches:
            if card.alias_explicit:
                return card
        if matches:
            return matches[0]
        raise NotFound("card", ident, hint=f'board "{board}"')


def infer_board(boards, global_config, project_root: str) -> str | None:
    """Pick a board without asking: the only board, else the repo's default."""
    names = boards.list()
    if len(names) == 1:
        return names[0]
    if global_config is not None and project_root:
        repo = global_config.get_repo(project_root)
        if repo is not None and repo.default_board and boards.exists(repo.default_board):
            return repo.default_board
    return None


class BoardResolver:
    """Choose the board a command operates on."""

    def __init__(self, boards, global_store, project_root: str, prompter: Prompter | None = None):
        self.boards = boards
        self.global_store = global_store
        self.project_root = project_root
        self.prompter = prompter

    def resolve(self, explicit: str = "", interactive: bool = False) -> str:
        if explicit:
            if not self.boards.exists(explicit):
                raise NotFound("board", explicit)
            return explicit

        names = self.boards.list()
        if not names:
            raise NotFound("board", "", hint="run 'kan init' first")

        board = infer_board(self.boards, self.global_store.load(), self.project_root)
        if board is not None:
            return board

        if interactive and self.prompter is not None:
            return self.prompter("Select board", names)

        raise AmbiguousBoard("multiple boards exist; specify with -b or set default_board in config")
