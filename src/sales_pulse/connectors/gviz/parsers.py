"""Parsing utilities for gviz JSONP responses.

A gviz response looks like:

    /*O_o*/
    google.visualization.Query.setResponse({"version":"0.6","status":"ok","table":{...}});

The JSON document sits between an opening and a closing parenthesis.
"""

import json
from enum import Enum
from typing import Any

from sales_pulse.errors import FormatError
from sales_pulse.models.raw import ParsedTable


class EnvelopeStrategy(str, Enum):
    """How to locate the JSON document inside the call-like wrapper."""

    # Text between the first "(" and the last ")". Breaks when a ")" appears
    # after the envelope, e.g. in a trailing comment.
    FIRST_LAST = "first_last"
    # Scan from the first "(" to the ")" that balances it, skipping JSON
    # string literals so parentheses inside values are ignored.
    BALANCED = "balanced"


def _unwrap_first_last(text: str) -> str:
    start = text.find("(")
    end = text.rfind(")")
    if start == -1 or end == -1:
        raise FormatError("Invalid data format from data source: no call envelope found")
    if end < start:
        raise FormatError("Invalid data format from data source: malformed call envelope")
    return text[start + 1 : end]


def _unwrap_balanced(text: str) -> str:
    start = text.find("(")
    if start == -1:
        raise FormatError("Invalid data format from data source: no call envelope found")
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return text[start + 1 : i]
    raise FormatError("Invalid data format from data source: unbalanced call envelope")


def unwrap_envelope(text: str, strategy: EnvelopeStrategy = EnvelopeStrategy.FIRST_LAST) -> str:
    """Return the JSON text embedded in a call-like wrapper."""
    if strategy is EnvelopeStrategy.BALANCED:
        return _unwrap_balanced(text)
    return _unwrap_first_last(text)


def _reject_constant(name: str) -> Any:
    raise FormatError(f"Invalid data format from data source: non-standard JSON constant {name}")


def decode_document(json_text: str) -> dict[str, Any]:
    """Decode the embedded JSON; it must be an object. NaN and Infinity tokens are rejected."""
    try:
        doc = json.loads(json_text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise FormatError(f"Invalid data format from data source: {e.msg}") from e
    if not isinstance(doc, dict):
        raise FormatError("Invalid data format from data source: expected a JSON object")
    return doc


def _query_error_message(doc: dict[str, Any]) -> str:
    """First human-readable message from a gviz error response."""
    for err in doc.get("errors") or []:
        if isinstance(err, dict):
            msg = err.get("detailed_message") or err.get("message") or err.get("reason")
            if msg:
                return str(msg)
    return "unknown query error"


def parse_payload(text: str, strategy: EnvelopeStrategy = EnvelopeStrategy.FIRST_LAST) -> ParsedTable:
    """
    Unwrap, decode, and convert a gviz response body into a ParsedTable.
    A document without table/rows yields an empty table; the normalizer rejects it.
    """
    doc = decode_document(unwrap_envelope(text, strategy))
    if doc.get("status") == "error":
        raise FormatError(f"Data source query failed: {_query_error_message(doc)}")
    table = doc.get("table")
    if table is not None and not isinstance(table, dict):
        raise FormatError("Invalid data format from data source: 'table' is not an object")
    if isinstance(table, dict) and table.get("rows") is not None and not isinstance(table["rows"], list):
        raise FormatError("Invalid data format from data source: 'rows' is not a list")
    if isinstance(table, dict) and table.get("cols") is not None and not isinstance(table["cols"], list):
        raise FormatError("Invalid data format from data source: 'cols' is not a list")
    return ParsedTable.from_document(doc)
