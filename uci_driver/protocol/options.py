"""
Engine Option Model

During the handshake an engine declares each configurable parameter on an
"option" line, for example:

    option name Threads type spin default 1 min 1 max 512
    option name Ponder type check default false
    option name Analysis Contempt type combo default Both var Off var White var Black var Both
    option name Clear Hash type button
    option name SyzygyPath type string default <empty>

parse_option() turns the text after "option " into an immutable Option.
Parsing is best-effort: a field that cannot be read falls back to its zero
value and the Option is flagged as malformed, but nothing is raised, so a
single odd declaration never aborts discovery of the rest.

Reference:
    UCI Protocol: https://www.chessprogramming.org/UCI#option
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)

# A value that can be sent with "setoption"
OptionValue = Union[bool, int, str]

# Name runs up to the first " type " token and may contain spaces
_NAME_RE = re.compile(r"\bname (.+?) type\b")
_TYPE_RE = re.compile(r"\btype (\S+)")
_DEFAULT_RE = re.compile(r"\bdefault (\S+)")
_MIN_RE = re.compile(r"\bmin (\S+)")
_MAX_RE = re.compile(r"\bmax (\S+)")
_VAR_RE = re.compile(r"\bvar (\S+)")


class OptionKind(Enum):
    """Declared type of an engine option."""
    CHECK = "check"
    SPIN = "spin"
    COMBO = "combo"
    BUTTON = "button"
    STRING = "string"


@dataclass(frozen=True)
class Option:
    """
    One engine-configurable parameter.

    Attributes:
        name: Option name, may contain spaces
        kind: Declared type, None if missing or not a known UCI type
        default: bool for check, int for spin, str for combo/string,
            None for button or when no default was declared
        min: Lower bound (spin only, 0 otherwise)
        max: Upper bound (spin only, 0 otherwise)
        allowed_values: Values accepted by a combo, in declaration order
        malformed: True if any field had to fall back to a zero value
    """
    name: str
    kind: Optional[OptionKind]
    default: Union[bool, int, str, None] = None
    min: int = 0
    max: int = 0
    allowed_values: Tuple[str, ...] = ()
    malformed: bool = field(default=False, compare=False)

    def accepts(self, value: OptionValue) -> bool:
        """
        Check whether value fits this option's declared constraints.

        Only spin bounds and combo choices are checked; every other kind
        accepts anything. A spin declared without bounds (min = max = 0)
        accepts any integer.
        """
        if self.kind is OptionKind.SPIN:
            if not isinstance(value, int) or isinstance(value, bool):
                return False
            if self.min == 0 and self.max == 0:
                return True
            return self.min <= value <= self.max
        if self.kind is OptionKind.COMBO:
            return str(value) in self.allowed_values
        return True


def _match(regex: re.Pattern, text: str) -> Optional[str]:
    match = regex.search(text)
    return match.group(1) if match else None


def _to_int(raw: Optional[str]) -> Tuple[int, bool]:
    """Parse an integer field; returns (value, ok)."""
    if raw is None:
        return 0, True
    try:
        return int(raw), True
    except ValueError:
        return 0, False


def parse_option(text: str) -> Option:
    """
    Parse an option declaration.

    Args:
        text: Declaration with the leading "option " already removed,
            e.g. "name Hash type spin default 16 min 1 max 33554432"

    Returns:
        Option with every field that could be read; unreadable fields are
        zero-valued and the result is flagged malformed
    """
    malformed = False

    name_match = _NAME_RE.search(text)
    if name_match is None:
        name = ""
        malformed = True
    else:
        name = name_match.group(1)

    # Everything after the kind word holds the attributes, so "default"
    # or "min" appearing inside a name cannot be picked up
    type_match = _TYPE_RE.search(text, name_match.end(1) if name_match else 0)
    if type_match is None:
        return Option(name=name, kind=None, malformed=True)

    raw_kind = type_match.group(1)
    tail = text[type_match.end():]

    try:
        kind: Optional[OptionKind] = OptionKind(raw_kind)
    except ValueError:
        kind = None
        malformed = True

    raw_default = _match(_DEFAULT_RE, tail)
    default: Union[bool, int, str, None] = raw_default
    minimum = maximum = 0

    if kind is OptionKind.SPIN:
        raw_min = _match(_MIN_RE, tail)
        raw_max = _match(_MAX_RE, tail)
        default, ok_default = _to_int(raw_default)
        minimum, ok_min = _to_int(raw_min)
        maximum, ok_max = _to_int(raw_max)
        malformed = malformed or not (ok_default and ok_min and ok_max)
        if raw_default is None:
            default = None
        elif raw_min is not None and raw_max is not None and not minimum <= default <= maximum:
            # Declared default must lie within the declared bounds
            malformed = True
    elif kind is OptionKind.CHECK:
        default = raw_default == "true" if raw_default is not None else None
    elif kind is OptionKind.BUTTON:
        default = None

    allowed_values: Tuple[str, ...] = ()
    if kind is OptionKind.COMBO:
        allowed_values = tuple(_VAR_RE.findall(tail))

    option = Option(
        name=name,
        kind=kind,
        default=default,
        min=minimum,
        max=maximum,
        allowed_values=allowed_values,
        malformed=malformed,
    )

    if malformed:
        logger.debug(f"Malformed option declaration, degraded to {option}: {text}")

    return option


def format_option_value(value: OptionValue) -> str:
    """
    Render a setoption value as protocol text.

    Args:
        value: bool, int or str

    Returns:
        "true"/"false" for booleans, decimal text for integers, strings
        unchanged

    Raises:
        TypeError: For any other type
    """
    # bool is a subclass of int, so it must be tested first
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    raise TypeError(
        f"Option value must be bool, int or str, got {type(value).__name__}"
    )
