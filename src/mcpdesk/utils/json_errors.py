# ABOUTME: JSON decoding with diagnosable errors for the client config file
# ABOUTME: Converts decoder failures into ParseError with 1-indexed line/column
import json
from typing import Any

from mcpdesk.errors import ParseError
from mcpdesk.models import SERVERS_FIELD
from mcpdesk.utils.json_spans import find_member, scan_object

# ABOUTME: error_type -> (user message, suggestion)
ERROR_MESSAGES: dict[str, tuple[str, str]] = {
    "incomplete": (
        "The JSON file appears to be incomplete or truncated",
        "Check if the file ends properly with closing braces }",
    ),
    "trailing_comma": (
        "Found an extra comma at the end of a list or object",
        "Remove the trailing comma before the closing bracket",
    ),
    "duplicate_key": (
        "Found duplicate server names in the configuration",
        "Each server must have a unique name",
    ),
    "syntax": (
        "Invalid JSON syntax found",
        "Check for missing commas, quotes, or brackets around the error location",
    ),
    "unknown": (
        "JSON parsing error occurred",
        "Please check your JSON syntax or restore from backup",
    ),
}


def offset_to_line_column(text: str, offset: int) -> tuple[int, int]:
    """Convert a character offset into a 1-indexed (line, column) pair.

    ABOUTME: Offsets past the end are clamped to the end of the text

    Examples:
        >>> offset_to_line_column('{\\n  "a": }', 9)
        (2, 8)
    """
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset) + 1
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1


def _previous_significant(text: str, offset: int) -> str:
    index = min(offset, len(text)) - 1
    while index >= 0 and text[index].isspace():
        index -= 1
    return text[index] if index >= 0 else ""


def classify_decode_error(text: str, error: json.JSONDecodeError) -> str:
    """Map a decoder failure onto one of the ERROR_MESSAGES kinds."""
    msg = error.msg
    if "trailing comma" in msg.lower():
        return "trailing_comma"

    current = text[error.pos] if error.pos < len(text) else ""
    if current in ("}", "]") and _previous_significant(text, error.pos) == ",":
        return "trailing_comma"

    if error.pos >= len(text.rstrip()) or msg.startswith("Unterminated string"):
        return "incomplete"

    if msg.startswith(("Expecting", "Invalid", "Extra data")):
        return "syntax"

    return "unknown"


def parse_error_from_decode(text: str, error: json.JSONDecodeError) -> ParseError:
    """Build a ParseError from a json.JSONDecodeError.

    ABOUTME: Location is computed from the raw offset, not the decoder's lineno
    """
    error_type = classify_decode_error(text, error)
    message, suggestion = ERROR_MESSAGES[error_type]
    line, column = offset_to_line_column(text, error.pos)
    return ParseError(
        message,
        line=line,
        column=column,
        error_type=error_type,
        suggestion=suggestion,
        detail=error.msg,
    )


def _locate_duplicate(text: str, key: str) -> tuple[int, int] | None:
    """Find the second server-level occurrence of key in the raw text.

    ABOUTME: Only direct members of the servers object count, nested keys don't
    """
    top = scan_object(text)
    field = find_member(top, SERVERS_FIELD)
    if field is None:
        return None
    servers = scan_object(text, field.value_start)
    offsets = [m.key_start for m in servers.members if m.key == key]
    if len(offsets) < 2:
        return None
    return offset_to_line_column(text, offsets[1])


class _NonFiniteNumber(ValueError):
    def __init__(self, token: str) -> None:
        super().__init__(token)
        self.token = token


def _reject_constant(token: str) -> Any:
    raise _NonFiniteNumber(token)


def _locate_bare(text: str, token: str) -> int | None:
    """Offset of the first occurrence of token outside string literals."""
    in_string = False
    escaped = False
    for offset, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif text.startswith(token, offset):
            return offset
    return None


def loads_strict(text: str, **kwargs: Any) -> Any:
    """json.loads that only accepts standard JSON.

    ABOUTME: NaN and Infinity literals are rejected like any other syntax error

    Raises:
        ParseError: If the text is not valid JSON
    """
    try:
        return json.loads(text, parse_constant=_reject_constant, **kwargs)
    except json.JSONDecodeError as e:
        raise parse_error_from_decode(text, e) from e
    except _NonFiniteNumber as e:
        offset = _locate_bare(text, e.token)
        line, column = offset_to_line_column(text, offset) if offset is not None else (None, None)
        message, suggestion = ERROR_MESSAGES["syntax"]
        raise ParseError(
            message,
            line=line,
            column=column,
            error_type="syntax",
            suggestion=suggestion,
            detail=f"'{e.token}' is not a valid JSON value",
        ) from e


def decode_document(text: str) -> Any:
    """Decode a config document, rejecting duplicate server names.

    ABOUTME: Duplicates are recorded per object while decoding
    ABOUTME: Only duplicates inside the servers mapping are treated as errors

    Raises:
        ParseError: If the JSON is malformed or a server name repeats
    """
    flagged: list[tuple[dict[str, Any], str]] = []

    def pairs_hook(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
        obj: dict[str, Any] = {}
        for key, value in pairs:
            if key in obj:
                flagged.append((obj, key))
            obj[key] = value
        return obj

    data = loads_strict(text, object_pairs_hook=pairs_hook)

    servers = data.get(SERVERS_FIELD) if isinstance(data, dict) else None
    repeated = [key for obj, key in flagged if obj is servers]
    if repeated:
        key = repeated[0]
        message, suggestion = ERROR_MESSAGES["duplicate_key"]
        location = _locate_duplicate(text, key)
        line, column = location if location else (None, None)
        raise ParseError(
            message,
            line=line,
            column=column,
            error_type="duplicate_key",
            suggestion=suggestion,
            detail=f"duplicate server name '{key}'",
        )

    return data
