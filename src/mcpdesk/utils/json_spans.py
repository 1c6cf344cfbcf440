# ABOUTME: Raw-text positions of JSON object members
# ABOUTME: Lets the store edit one member in place and leave every other byte alone
import json
from dataclasses import dataclass, replace
from json.decoder import scanstring
from typing import Any

WHITESPACE = " \t\n\r"

_decoder = json.JSONDecoder()


@dataclass(frozen=True)
class MemberSpan:
    """Offsets of one `"key": value` pair.

    ABOUTME: key_start is the opening quote, key_end is just past the closing quote
    ABOUTME: value_end is just past the last character of the value
    """
    key: str
    key_start: int
    key_end: int
    value_start: int
    value_end: int


@dataclass(frozen=True)
class ObjectSpan:
    """Offsets of an object: start is its `{`, end is just past its `}`."""
    start: int
    end: int
    members: tuple[MemberSpan, ...]


def skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in WHITESPACE:
        pos += 1
    return pos


def scan_object(text: str, start: int = 0) -> ObjectSpan:
    """Locate the members of the object at (or after whitespace from) start.

    ABOUTME: text must already be known to decode; this walks it, it doesn't validate
    ABOUTME: Duplicate keys each get their own MemberSpan, in file order

    Raises:
        ValueError: If there is no object at start
    """
    pos = skip_whitespace(text, start)
    if text[pos:pos + 1] != "{":
        raise ValueError(f"Expected a JSON object at offset {pos}")
    obj_start = pos
    members: list[MemberSpan] = []

    pos = skip_whitespace(text, pos + 1)
    if text[pos] == "}":
        return ObjectSpan(obj_start, pos + 1, ())

    while True:
        key_start = pos
        key, key_end = scanstring(text, key_start + 1)
        # Skip the ':' and the whitespace around it
        value_start = skip_whitespace(text, skip_whitespace(text, key_end) + 1)
        _, value_end = _decoder.raw_decode(text, value_start)
        members.append(MemberSpan(key, key_start, key_end, value_start, value_end))

        pos = skip_whitespace(text, value_end)
        if text[pos] == "}":
            return ObjectSpan(obj_start, pos + 1, tuple(members))
        pos = skip_whitespace(text, pos + 1)


def find_member(obj: ObjectSpan, key: str) -> MemberSpan | None:
    """Return the last member named key (the one a decoder keeps), or None."""
    for member in reversed(obj.members):
        if member.key == key:
            return member
    return None


def _whitespace_before(text: str, offset: int) -> str:
    start = offset
    while start > 0 and text[start - 1] in WHITESPACE:
        start -= 1
    return text[start:offset]


@dataclass(frozen=True)
class Layout:
    """How an object's members are laid out in the file.

    ABOUTME: lead is the whitespace before each key, close the whitespace before `}`
    ABOUTME: Multi-line layouts render new values with json indent=step
    """
    lead: str
    colon: str
    close: str
    member_indent: str
    step: str
    newline: str
    item_sep: str

    @property
    def multiline(self) -> bool:
        return "\n" in self.lead

    def render(self, value: Any) -> str:
        """Serialize a value to sit at this layout's member position."""
        if self.multiline:
            text = json.dumps(value, indent=self.step, ensure_ascii=False, allow_nan=False)
            return text.replace("\n", self.newline + self.member_indent)
        return json.dumps(
            value, ensure_ascii=False, allow_nan=False, separators=(self.item_sep, self.colon)
        )

    def member(self, key: str, value: Any) -> str:
        return json.dumps(key, ensure_ascii=False) + self.colon + self.render(value)

    def nested(self) -> "Layout":
        """Layout for the members of an object held one level below this one."""
        if not self.multiline:
            return replace(self, lead="", close="")
        child = self.member_indent + self.step
        return replace(
            self,
            lead=self.newline + child,
            close=self.newline + self.member_indent,
            member_indent=child,
        )


# ABOUTME: Layout of a fresh document, matching dump_json (2-space indent)
DEFAULT_LAYOUT = Layout(
    lead="\n  ",
    colon=": ",
    close="\n",
    member_indent="  ",
    step="  ",
    newline="\n",
    item_sep=", ",
)


def layout_of(text: str, obj: ObjectSpan, fallback: Layout) -> Layout:
    """Infer an object's layout from its last member; fallback for empty objects."""
    if not obj.members:
        return fallback

    last = obj.members[-1]
    lead = _whitespace_before(text, last.key_start)
    colon = text[last.key_end:last.value_start]
    close = text[last.value_end:obj.end - 1]
    if "\n" not in lead:
        return replace(fallback, lead=lead, colon=colon, close=close, item_sep="," + lead)

    newline = "\r\n" if "\r\n" in lead else "\n"
    member_indent = lead.rsplit("\n", 1)[1]
    close_indent = close.rsplit("\n", 1)[1] if "\n" in close else ""
    if member_indent.startswith(close_indent) and len(member_indent) > len(close_indent):
        step = member_indent[len(close_indent):]
    else:
        step = fallback.step
    return Layout(
        lead=lead,
        colon=colon,
        close=close,
        member_indent=member_indent,
        step=step,
        newline=newline,
        item_sep="," + lead,
    )


def insert_member(text: str, obj: ObjectSpan, key: str, value: Any, layout: Layout) -> str:
    """Append `"key": value` as the last member of obj."""
    member = layout.member(key, value)
    if obj.members:
        at = obj.members[-1].value_end
        return text[:at] + "," + layout.lead + member + text[at:]
    return text[:obj.start + 1] + layout.lead + member + layout.close + text[obj.end - 1:]


def remove_member(text: str, obj: ObjectSpan, member: MemberSpan) -> str:
    """Cut a member and one adjoining comma out of obj."""
    index = obj.members.index(member)
    if len(obj.members) == 1:
        return text[:obj.start + 1] + text[obj.end - 1:]
    if index > 0:
        previous = obj.members[index - 1]
        return text[:previous.value_end] + text[member.value_end:]
    following = obj.members[1]
    return text[:member.key_start] + text[following.key_start:]


def replace_value(text: str, member: MemberSpan, value: Any, layout: Layout) -> str:
    return text[:member.value_start] + layout.render(value) + text[member.value_end:]
