"""
Field paths - Address a location inside a structured value.

A path is a sequence of segments: string keys walk mappings, integer
indexes walk sequences. The dotted form is the canonical rendering:

    "user.emails[0]"  ->  ("user", "emails", 0)

Resolution never raises. Anything that cannot be walked yields ABSENT.
"""

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from rulekit.core.errors import InvalidRuleError


class _Absent:
    """Sentinel for a path that does not exist in the input."""

    _instance: "_Absent | None" = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()

Segment = Union[str, int]

# name followed by any number of [index] suffixes, or bare [index] suffixes
_SEGMENT_PATTERN = re.compile(r"^([^.\[\]]*)((?:\[\d+\])*)$")
_INDEX_PATTERN = re.compile(r"\[(\d+)\]")


@dataclass(frozen=True)
class FieldPath:
    """An immutable, hashable field selector."""

    segments: tuple[Segment, ...]

    def __post_init__(self) -> None:
        if not self.segments:
            raise InvalidRuleError("Path must not be empty")
        for segment in self.segments:
            # bool is an int subclass but never a valid index
            if isinstance(segment, bool):
                raise InvalidRuleError(f"Invalid path segment: {segment!r}")
            if isinstance(segment, int):
                if segment < 0:
                    raise InvalidRuleError(f"Negative index in path: {segment}")
            elif isinstance(segment, str):
                if not segment:
                    raise InvalidRuleError("Empty key in path")
            else:
                raise InvalidRuleError(
                    f"Path segments must be str or int, got: {type(segment).__name__}"
                )

    @classmethod
    def parse(cls, text: str) -> "FieldPath":
        """
        Parse a dotted path string.

        Args:
            text: Path such as "a.b[0].c"

        Returns:
            FieldPath

        Raises:
            InvalidRuleError: If the text is empty or malformed
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidRuleError("Path must be a non-empty string")

        segments: list[Segment] = []
        for i, part in enumerate(text.split(".")):
            match = _SEGMENT_PATTERN.match(part)
            if match is None:
                raise InvalidRuleError(f"Malformed path: {text!r}")
            key, indexes = match.groups()
            if key:
                segments.append(key)
            elif not indexes or i > 0:
                # "a..b", "a.", "a.[0]" are all malformed
                raise InvalidRuleError(f"Malformed path: {text!r}")
            segments.extend(int(idx) for idx in _INDEX_PATTERN.findall(indexes))

        return cls(tuple(segments))

    @classmethod
    def of(cls, value: "FieldPath | str | Sequence[Segment]") -> "FieldPath":
        """Coerce a path-like value (FieldPath, dotted string, or segments)."""
        if isinstance(value, FieldPath):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, Sequence):
            return cls(tuple(value))
        raise InvalidRuleError(f"Not a path: {value!r}")

    def resolve(self, value: Any) -> Any:
        """
        Walk the path through a structured value.

        Returns:
            The addressed value, or ABSENT if any step is missing
        """
        current = value
        for segment in self.segments:
            if isinstance(segment, str):
                if not isinstance(current, Mapping) or segment not in current:
                    return ABSENT
                current = current[segment]
            else:
                if (
                    not isinstance(current, Sequence)
                    or isinstance(current, (str, bytes))
                    or segment >= len(current)
                ):
                    return ABSENT
                current = current[segment]
        return current

    def __str__(self) -> str:
        out = ""
        for segment in self.segments:
            if isinstance(segment, int):
                out += f"[{segment}]"
            else:
                out += f".{segment}" if out else segment
        return out

    def to_config(self) -> "str | list[Segment]":
        """
        Wire-format field value.

        The dotted string when it parses back to this path, otherwise the
        segment list (keys containing ".", "[" or "]").
        """
        text = str(self)
        try:
            if FieldPath.parse(text) == self:
                return text
        except InvalidRuleError:
            pass
        return list(self.segments)
