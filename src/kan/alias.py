"""Short, unique card aliases derived from titles."""

import re
import unicodedata

from kan.errors import ValidationFailure

SLUG_THRESHOLD = 20
MIN_SLUG_WORDS = 2
MAX_SUFFIX = 1000

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slug_words(text: str) -> list[str]:
    """Lowercase, accent-free words of text.

    "Fix the Café bug!" → ["fix", "the", "cafe", "bug"]
    """
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(c for c in decomposed if unicodedata.category(c) != "Mn")
    slug = _NON_ALNUM.sub("-", stripped).strip("-")
    return slug.split("-") if slug else []


def words_for_threshold(words: list[str]) -> int:
    """How many leading words go into the initial slug.

    At least MIN_SLUG_WORDS, then more while the hyphen-joined result stays
    within SLUG_THRESHOLD characters.
    """
    count = min(MIN_SLUG_WORDS, len(words))
    for i in range(count, len(words)):
        if len("-".join(words[: i + 1])) > SLUG_THRESHOLD:
            break
        count = i + 1
    return count


def is_alias_available(cards, board: str, alias: str, exclude_id: str = "") -> bool:
    """True if no card on board other than exclude_id uses alias."""
    return all(card.id == exclude_id for card in cards.find_by_alias(board, alias))


def generate_alias(cards, board: str, title: str, exclude_id: str = "") -> str:
    """Derive an unused alias for title on board.

    On a collision more title words are added one at a time; once those run
    out a numeric suffix is appended to the initial slug.
    """
    words = slug_words(title) or ["card"]
    initial = words_for_threshold(words)
    base = "-".join(words[:initial])
    if is_alias_available(cards, board, base, exclude_id):
        return base

    for i in range(initial, len(words)):
        candidate = "-".join(words[: i + 1])
        if is_alias_available(cards, board, candidate, exclude_id):
            return candidate

    for n in range(2, MAX_SUFFIX + 1):
        candidate = f"{base}-{n}"
        if is_alias_available(cards, board, candidate, exclude_id):
            return candidate

    raise ValidationFailure(f"could not generate a unique alias for {title!r}", field="alias")
