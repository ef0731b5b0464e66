"""Annotation token codec for Task Hub.

Task metadata lives inline in a checklist line as ``@key(value)`` tokens::

    - [ ] Call Bob @due(2024-03-01) @priority(High) @person(Bob)

``decode_annotations`` pulls the tokens out of a line body and
``encode_annotations`` writes them back in canonical order. Token order and
spacing are not preserved, only the logical content of the line.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union


# Key is a word, value is anything up to the first ')'. There is no escape
# for a literal ')' inside a value.
TOKEN_RE = re.compile(r"@(\w+)\(([^)]*)\)", re.ASCII)

# Single-valued keys, in canonical serialization order
SINGLE_KEYS = ("created", "due", "closed", "status", "priority", "project")
PERSON_KEY = "person"

# Characters a written value cannot carry without breaking the line
TOKEN_FORBIDDEN = (")", "\r", "\n")


@dataclass
class ParsedAnnotations:
    """Structured content of a checklist line body."""
    text: str = ""
    created: Optional[str] = None
    due: Optional[str] = None
    closed: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    project: Optional[str] = None
    people: List[str] = field(default_factory=list)
    extra: List[Tuple[str, str]] = field(default_factory=list)

    def set_field(self, name: str, value: Union[None, str, List[str]]) -> None:
        """Replace a single field.

        Empty strings and None clear the field. ``people`` accepts either a
        list or a comma separated string.

        Raises:
            ValueError: If the field is unknown or the value cannot be
                written as a token (a ')' or a line break in a value, an
                annotation token inside the text)
        """
        if name == "people":
            if value is None:
                people = []
            elif isinstance(value, str):
                people = [p.strip() for p in value.split(",") if p.strip()]
            else:
                people = [str(p).strip() for p in value if str(p).strip()]
            for person in people:
                _check_token_value(name, person)
            self.people = people
            return

        if name == "text":
            text = _collapse(value or "")
            if TOKEN_RE.search(text):
                raise ValueError(f"Text cannot contain an annotation token: {text!r}")
            self.text = text
            return

        if name not in SINGLE_KEYS:
            raise ValueError(f"Unknown annotation field: {name}")

        if isinstance(value, str):
            value = value.strip()
            _check_token_value(name, value)
        setattr(self, name, value or None)


def _check_token_value(name: str, value: str) -> None:
    if any(c in value for c in TOKEN_FORBIDDEN):
        raise ValueError(f"Value for {name} cannot contain ')' or a line break: {value!r}")


def _collapse(text: str) -> str:
    """Trim and collapse whitespace runs to single spaces."""
    return " ".join(text.split())


def decode_annotations(body: str) -> ParsedAnnotations:
    """Decode the annotation tokens of a checklist line body.

    Removing a token can join its neighbours into a new one (``@a@b(c)(d)``),
    so tokens are extracted pass by pass until none is left in the text.

    Args:
        body: Line text after the checkbox

    Returns:
        ParsedAnnotations with the tokens removed from ``text``
    """
    parsed = ParsedAnnotations()

    remaining = body
    while TOKEN_RE.search(remaining):
        for match in TOKEN_RE.finditer(remaining):
            key, value = match.group(1), match.group(2)
            if key == PERSON_KEY:
                parsed.people.append(value)
            elif key in SINGLE_KEYS:
                # Last occurrence wins
                setattr(parsed, key, value)
            else:
                parsed.extra.append((key, value))
        remaining = TOKEN_RE.sub("", remaining)

    parsed.text = _collapse(remaining)
    return parsed


def format_token(key: str, value: str) -> str:
    """Render one ``@key(value)`` token."""
    return f"@{key}({value})"


def encode_annotations(parsed: ParsedAnnotations) -> str:
    """Serialize structured annotations back into line body text.

    Tokens follow the text in canonical order: created, due, closed,
    status, priority, project, then people, then unrecognized tokens.
    """
    parts = [parsed.text] if parsed.text else []

    for key in SINGLE_KEYS:
        value = getattr(parsed, key)
        if value is not None:
            parts.append(format_token(key, value))

    parts.extend(format_token(PERSON_KEY, person) for person in parsed.people)
    parts.extend(format_token(key, value) for key, value in parsed.extra)

    return " ".join(parts)
