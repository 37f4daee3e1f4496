# dental_booking/app/services/slots/encoding.py
"""
Field value encodings of a Selection.

Token list (staff / guest pickers):
    ["3|09:00 AM-09:30 AM", "4|09:30 AM-10:00 AM"]
Range (public picker):
    {"startTime": "09:00", "endTime": "10:00"}

Both directions: encode a committed Selection, decode a persisted value
(edit mode preselect). Decoding never raises on malformed data.
"""

import json
import logging
from collections.abc import Mapping
from enum import Enum

from .domain import Selection, Slot
from .timefmt import parse_minutes

logger = logging.getLogger(__name__)

TOKEN_SEPARATOR = "|"


class Encoding(str, Enum):
    TOKENS = "tokens"
    RANGE = "range"


def empty_value(encoding: Encoding) -> list | None:
    """Cleared field value for the encoding."""
    return [] if encoding == Encoding.TOKENS else None


def encode_selection(selection: Selection | None, encoding: Encoding) -> list[str] | dict | None:
    if not selection:
        return empty_value(encoding)
    if encoding == Encoding.TOKENS:
        return [slot.token for slot in selection.slots]
    return {"startTime": selection.start_time, "endTime": selection.end_time}


def parse_token(token: str) -> tuple[int, str] | None:
    """ "3|09:00 AM-09:30 AM" → (3, "09:00 AM-09:30 AM"), None if malformed."""
    if not isinstance(token, str) or TOKEN_SEPARATOR not in token:
        return None
    raw_index, code = token.split(TOKEN_SEPARATOR, 1)
    try:
        index = int(raw_index.strip())
    except ValueError:
        return None
    return index, code.strip()


def decode_selection(value, grid: list[Slot]) -> Selection | None:
    """
    Decode a persisted field value against the current grid.

    Accepts a token list, a {"startTime", "endTime"} mapping, or a JSON
    string of either. Returns None when nothing on the grid matches.
    """
    if value is None or not grid:
        return None

    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Persisted selection is not valid JSON: %r", value)
            return None

    if isinstance(value, Mapping):
        return _decode_range(value, grid)
    if isinstance(value, (list, tuple)):
        return _decode_tokens(value, grid)

    logger.warning("Unsupported persisted selection type %s", type(value).__name__)
    return None


# ── Helpers ──────────────────────────────────────────────────────────────


def _decode_tokens(tokens, grid: list[Slot]) -> Selection | None:
    by_index = {slot.index: slot for slot in grid}
    indexes: set[int] = set()

    for token in tokens:
        parsed = parse_token(token)
        if parsed is None:
            logger.warning("Skipping malformed slot token %r", token)
            continue
        index, code = parsed
        slot = by_index.get(index)
        if slot is None:
            continue
        if slot.code != code:
            logger.warning("Skipping slot token %r: slot %s is now %r", token, index, slot.code)
            continue
        indexes.add(index)

    if not indexes:
        return None

    ordered = sorted(indexes)
    run = [ordered[0]]
    for index in ordered[1:]:
        if index != run[-1] + 1:
            logger.warning("Persisted selection %s is not contiguous, keeping %s", ordered, run)
            break
        run.append(index)

    return Selection(slots=tuple(by_index[i] for i in run))


def _decode_range(value: Mapping, grid: list[Slot]) -> Selection | None:
    start = parse_minutes(value.get("startTime"))
    end = parse_minutes(value.get("endTime"))
    if start is None or end is None:
        logger.warning("Skipping malformed persisted range %r", dict(value))
        return None

    # Legacy ranges store the last slot's start as endTime.
    ends_on_boundary = any(slot.end_min == end for slot in grid)
    legacy = not ends_on_boundary and any(slot.start_min == end for slot in grid)

    if legacy:
        slots = [slot for slot in grid if start <= slot.start_min <= end]
    else:
        slots = [slot for slot in grid if slot.start_min >= start and slot.end_min <= end]

    if not slots:
        return None
    return Selection(slots=tuple(slots))
