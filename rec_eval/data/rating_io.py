"""
Reading and writing ratings as text.

Two line formats are accepted and parse to identical RatingStore semantics:

    user \\t item \\t value [\\t extra columns...]
    user \\t [item:value,item:value,...]

The first is the usual ratings/recommendations layout (extra columns such as
a MovieLens timestamp are ignored); the second is the bracketed list form
written by some recommender frameworks. Duplicated (user, item) pairs follow
last-write-wins, within a line and across lines.

Malformed lines either abort the load (errors="raise", the default) or are
logged and skipped (errors="skip").
"""

import logging
import math
from pathlib import Path
from typing import Callable, Hashable, Iterable, List, Optional, Union

from ..shared_utils import ParseError
from .ratings import RatingStore, Triple

logger = logging.getLogger(__name__)

IdType = Callable[[str], Hashable]

ERROR_MODES = ("raise", "skip")


def _parse_id(token: str, id_type: IdType, what: str, line: str) -> Hashable:
    token = token.strip()
    if not token:
        raise ParseError(f"empty {what} id", line)
    try:
        return id_type(token)
    except ValueError as e:
        raise ParseError(f"invalid {what} id {token!r}: {e}", line) from e


def _parse_value(token: str, line: str) -> float:
    try:
        return float(token.strip())
    except ValueError as e:
        raise ParseError(f"invalid value {token.strip()!r}", line) from e


def parse_line(line: str, id_type: IdType = int) -> List[Triple]:
    """
    Parse a single rating line.

    Args:
        line: Line in either tab-separated or bracketed list form
        id_type: Converter applied to user and item tokens (default: int)

    Returns:
        List of (user, item, value) triples; empty for blank lines

    Raises:
        ParseError: If the line is malformed
    """
    line = line.rstrip("\r\n")
    if not line.strip():
        return []

    toks = line.split("\t")
    if len(toks) < 2:
        raise ParseError("expected tab-separated fields", line)

    user = _parse_id(toks[0], id_type, "user", line)
    second = toks[1].strip()

    # Bracketed list form: user \t [item:value,item:value,...]
    if second.startswith("["):
        if not second.endswith("]") or len(toks) != 2:
            raise ParseError("unterminated item list", line)
        body = second[1:-1].strip()
        if not body:
            return []
        triples = []
        for pair in body.split(","):
            parts = pair.split(":")
            if len(parts) != 2:
                raise ParseError(f"expected item:value pair, got {pair!r}", line)
            item = _parse_id(parts[0], id_type, "item", line)
            triples.append((user, item, _parse_value(parts[1], line)))
        return triples

    if len(toks) < 3:
        raise ParseError("expected user, item and value fields", line)
    item = _parse_id(toks[1], id_type, "item", line)
    return [(user, item, _parse_value(toks[2], line))]


def read_ratings(
    lines: Iterable[str],
    errors: str = "raise",
    id_type: IdType = int,
    source: Optional[str] = None,
    store: Optional[RatingStore] = None,
) -> RatingStore:
    """
    Parse rating lines into a RatingStore.

    Args:
        lines: Iterable of text lines
        errors: "raise" to abort on the first malformed line, "skip" to log
            and continue
        id_type: Converter applied to user and item tokens
        source: Description of the input used in error messages
        store: Existing store to add to (a new one is created if None)

    Returns:
        The populated RatingStore

    Raises:
        ValueError: If errors is not a known mode
        ParseError: On the first malformed line when errors="raise"
    """
    if errors not in ERROR_MODES:
        raise ValueError(f"Invalid errors mode: {errors!r}. Valid modes: {ERROR_MODES}")

    if store is None:
        store = RatingStore()

    skipped = 0
    for line_number, line in enumerate(lines, 1):
        try:
            triples = parse_line(line, id_type=id_type)
        except ParseError as e:
            error = ParseError(e.reason, e.line, line_number, source)
            if errors == "raise":
                raise error from e
            skipped += 1
            logger.warning(f"Skipping malformed line: {error}")
            continue

        for user, item, value in triples:
            store.add_preference(user, item, value)

    if skipped:
        logger.warning(f"Skipped {skipped:,} malformed line(s) in {source or 'input'}")

    return store


def load_rating_store(
    path: Union[str, Path],
    errors: str = "raise",
    id_type: IdType = int,
) -> RatingStore:
    """
    Load a ratings or recommendations file.

    Args:
        path: File to read
        errors: "raise" or "skip" (see read_ratings)
        id_type: Converter applied to user and item tokens

    Returns:
        RatingStore with the file's contents
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        store = read_ratings(f, errors=errors, id_type=id_type, source=str(path))

    logger.info(
        f"Loaded {store.num_preferences():,} preferences from {store.num_users:,} users "
        f"on {store.num_items:,} items ({path.name})"
    )
    return store


def format_value(value: float) -> str:
    """Render a preference value, dropping the fraction for whole numbers."""
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return repr(value)


def save_rating_store(store: RatingStore, path: Union[str, Path]) -> None:
    """
    Write a store as sorted "user \\t item \\t value" lines.

    Args:
        store: Store to write
        path: Output file (parent directories are created)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        for user in sorted(store.get_users()):
            prefs = store.get_user_preferences(user)
            for item in sorted(prefs):
                f.write(f"{user}\t{item}\t{format_value(prefs[item])}\n")

    logger.info(f"Saved {store.num_preferences():,} preferences to {path}")
