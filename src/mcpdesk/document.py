# Conversion between the on-disk config document and ServerEntry objects
from typing import Any

from mcpdesk.errors import NotFoundError, SchemaError
from mcpdesk.models import SERVERS_FIELD, ServerEdit, ServerEntry
from mcpdesk.utils.json_errors import decode_document
from mcpdesk.utils.json_spans import (
    DEFAULT_LAYOUT,
    MemberSpan,
    ObjectSpan,
    find_member,
    insert_member,
    layout_of,
    remove_member,
    replace_value,
    scan_object,
)

# ABOUTME: Starting text when add creates a config file that does not exist yet
EMPTY_DOCUMENT = "{}\n"


def _check_entry(name: str, data: Any) -> None:
    if not isinstance(data, dict):
        raise SchemaError(f"Server '{name}' must be a JSON object")
    command = data.get("command")
    if not isinstance(command, str):
        raise SchemaError(f"Server '{name}' missing required 'command' field")
    args = data.get("args", [])
    if not isinstance(args, list) or not all(isinstance(a, str) for a in args):
        raise SchemaError(f"Server '{name}' field 'args' must be a list of strings")
    env = data.get("env")
    if env is None:
        return
    if not isinstance(env, dict) or not all(isinstance(v, str) for v in env.values()):
        raise SchemaError(f"Server '{name}' field 'env' must map names to strings")


def parse_document(text: str) -> dict[str, Any]:
    """Decode and shape-check a config document.

    ABOUTME: Missing servers field is accepted (treated as no servers)
    ABOUTME: Sibling top-level fields are returned untouched

    Raises:
        ParseError: If the JSON is malformed
        SchemaError: If the document or a server entry has the wrong shape
    """
    data = decode_document(text)
    if not isinstance(data, dict):
        raise SchemaError("Config document must be a JSON object")

    servers = data.get(SERVERS_FIELD, {})
    if not isinstance(servers, dict):
        raise SchemaError(f"'{SERVERS_FIELD}' must be a JSON object mapping names to servers")

    for name, entry in servers.items():
        _check_entry(name, entry)

    return data


def servers_of(data: dict[str, Any]) -> dict[str, Any]:
    """Return the servers mapping of a parsed document, creating it if absent."""
    servers = data.get(SERVERS_FIELD)
    if servers is None:
        servers = {}
        data[SERVERS_FIELD] = servers
    return servers


def dict_to_entry(name: str, data: dict[str, Any]) -> ServerEntry:
    """Convert an on-disk server dict to a ServerEntry.

    ABOUTME: Handles missing args/env fields gracefully
    """
    return ServerEntry(
        name=name,
        command=data["command"],
        args=list(data.get("args", [])),
        env=dict(data.get("env") or {}),
    )


def entries_of(data: dict[str, Any]) -> dict[str, ServerEntry]:
    """All entries of a parsed document, sorted by name."""
    servers = data.get(SERVERS_FIELD, {})
    return {name: dict_to_entry(name, servers[name]) for name in sorted(servers)}


def edit_to_dict(edit: ServerEdit, existing: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build the on-disk dict for an edit.

    ABOUTME: Unknown per-server keys of an existing entry are carried over
    """
    result: dict[str, Any] = dict(existing) if existing else {}
    result.pop("env", None)
    result.update(edit.to_dict())
    return result


def _servers_span(text: str) -> tuple[ObjectSpan, MemberSpan | None]:
    top = scan_object(text)
    return top, find_member(top, SERVERS_FIELD)


def set_server(text: str, name: str, entry: dict[str, Any]) -> str:
    """Write one server entry into the raw document text.

    ABOUTME: Replaces the entry's value in place, or appends it to the servers object
    ABOUTME: Adds the servers field after the last top-level field if it is missing
    ABOUTME: Bytes outside the touched member are left exactly as they were
    """
    top, field = _servers_span(text)
    top_layout = layout_of(text, top, DEFAULT_LAYOUT)
    if field is None:
        return insert_member(text, top, SERVERS_FIELD, {name: entry}, top_layout)

    servers = scan_object(text, field.value_start)
    layout = layout_of(text, servers, top_layout.nested())
    existing = find_member(servers, name)
    if existing is None:
        return insert_member(text, servers, name, entry, layout)
    return replace_value(text, existing, entry, layout)


def remove_server(text: str, name: str) -> str:
    """Cut one server entry out of the raw document text.

    Raises:
        NotFoundError: If the entry isn't in the document
    """
    _, field = _servers_span(text)
    servers = scan_object(text, field.value_start) if field else None
    member = find_member(servers, name) if servers else None
    if servers is None or member is None:
        raise NotFoundError(f"Server '{name}' not found")
    return remove_member(text, servers, member)
