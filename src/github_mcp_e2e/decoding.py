"""Response decoding.

A CallToolResult carries an ordered list of content items. Simple tools answer with a
single text item holding JSON; file retrieval answers with a text acknowledgement plus
an embedded text resource. Anything else is a contract violation between harness and
server and raises a Decode error.
"""

from __future__ import annotations

import json
from typing import Any, TypeVar, overload

from mcp.types import CallToolResult, EmbeddedResource, TextContent, TextResourceContents
from pydantic import TypeAdapter, ValidationError

from .errors import decode_error

T = TypeVar("T")


def _require_count(result: CallToolResult, expected: int) -> None:
    count = len(result.content)
    if count != expected:
        raise decode_error(
            f"expected content to have {expected} item{'s' if expected != 1 else ''}",
            hint=f"got {count}",
        )


def decode_text(result: CallToolResult) -> str:
    """Return the text of the single text content item."""
    _require_count(result, 1)
    item = result.content[0]
    if not isinstance(item, TextContent):
        raise decode_error("expected content to be of type TextContent", hint=type(item).__name__)
    return item.text


@overload
def decode_json(result: CallToolResult) -> Any: ...


@overload
def decode_json(result: CallToolResult, shape: type[T]) -> T: ...


def decode_json(result: CallToolResult, shape: Any = None) -> Any:
    """Parse the single text item as JSON, optionally validated into `shape`.

    `shape` is anything pydantic can validate into: a BaseModel subclass,
    `list[Model]`, `dict[str, Any]`...
    """
    text = decode_text(result)
    if shape is None:
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise decode_error("expected to unmarshal JSON response", hint=str(exc)) from exc
    try:
        return TypeAdapter(shape).validate_json(text)
    except ValidationError as exc:
        raise decode_error(
            "expected to unmarshal JSON response",
            hint=f"{exc.error_count()} validation error(s): {exc.errors()[0].get('msg', '')}",
        ) from exc


def extract_embedded_text(result: CallToolResult) -> str:
    """Return the inner text of the embedded resource in a two-item file result."""
    _require_count(result, 2)
    item = result.content[1]
    if not isinstance(item, EmbeddedResource):
        raise decode_error("expected second content item to be an embedded resource", hint=type(item).__name__)
    resource = item.resource
    if not isinstance(resource, TextResourceContents):
        raise decode_error("expected embedded resource to contain text content", hint=type(resource).__name__)
    return resource.text


def error_text(result: CallToolResult) -> str:
    """Best-effort text of any result, for diagnostics."""
    parts: list[str] = []
    for item in result.content:
        if isinstance(item, TextContent):
            parts.append(item.text)
        elif isinstance(item, EmbeddedResource) and isinstance(item.resource, TextResourceContents):
            parts.append(item.resource.text)
    return "\n".join(parts)


def assert_text(result: CallToolResult, expected: str) -> None:
    """Assert the single text item equals `expected`."""
    content = decode_text(result)
    assert content == expected, f"expected text content to match: {content!r} != {expected!r}"


def assert_contains(result: CallToolResult, substring: str) -> None:
    """Assert the single text item contains `substring`."""
    content = decode_text(result)
    assert substring in content, f"expected content to contain {substring!r}"


def assert_array_length(result: CallToolResult, expected_length: int) -> None:
    """Assert the single text item is a JSON array of `expected_length` elements."""
    arr = decode_json(result, list[Any])
    assert len(arr) == expected_length, f"expected array to have {expected_length} items, got {len(arr)}"
