# This file is part of skyplate.
#
# Developed for the LSST Data Management System.
# This product includes software developed by the LSST Project
# (https://www.lsst.org).
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

"""Typed model and text parser for 80-column FITS header cards."""

from __future__ import annotations

__all__ = (
    "CARD_LENGTH",
    "COMMENTARY_KEYWORDS",
    "KeywordKind",
    "KeywordValue",
    "iter_cards",
    "parse_card",
)

import dataclasses
import enum
import re
from collections.abc import Iterator
from typing import final

import astropy.time

from ._errors import MalformedCardError

CARD_LENGTH = 80
"""Number of columns in a header card."""

COMMENTARY_KEYWORDS = frozenset({"COMMENT", "HISTORY", ""})
"""Keywords whose cards carry free text instead of a value."""

_KEYWORD_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_REAL_RE = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([EeDd][+-]?\d+)?$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}:\d{2}(\.\d+)?)?$")
_LEGACY_DATE_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{2})$")
_BARE_LEGACY_DATE_RE = re.compile(r"^(\d{2}/\d{2}/\d{2})(?:\s*/(.*))?$")
_HIERARCH_KEYWORD_RE = re.compile(r"^[A-Za-z0-9_-]+( [A-Za-z0-9_-]+)*$")

type KeywordPayload = bool | int | float | str | astropy.time.Time | None


class KeywordKind(enum.StrEnum):
    """Enumeration of the value types a header card can hold."""

    NONE = "none"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    REAL = "real"
    STRING = "string"
    COMMENT = "comment"
    DATE = "date"


@final
@dataclasses.dataclass(frozen=True)
class KeywordValue:
    """A single decoded header entry.

    Notes
    -----
    Exactly one typed payload is held, and `kind` says which.  The ``as_*``
    accessors raise `TypeError` when asked for a payload of a different kind
    rather than converting between types; use `value` with a ``match``
    statement on `kind` to handle every kind at once.
    """

    name: str
    """Keyword name, trimmed but with its case preserved (`str`)."""

    kind: KeywordKind
    """Which payload type this entry holds (`KeywordKind`)."""

    raw: str
    """The unparsed value field of the card, for diagnostics (`str`)."""

    payload: KeywordPayload = None
    """The decoded value; its type is determined by `kind`."""

    comment: str | None = None
    """Text following the ``/`` separator, if any (`str` or `None`)."""

    def __post_init__(self) -> None:
        if not _payload_matches(self.kind, self.payload):
            raise TypeError(
                f"Keyword {self.name!r} of kind {self.kind} cannot hold a "
                f"{type(self.payload).__name__} value."
            )

    @property
    def value(self) -> KeywordPayload:
        """The decoded value, whatever its kind."""
        return self.payload

    def _require(self, kind: KeywordKind) -> None:
        if self.kind is not kind:
            raise TypeError(f"Keyword {self.name!r} holds a {self.kind} value, not a {kind} value.")

    def as_bool(self) -> bool:
        """Return the payload of a `KeywordKind.BOOLEAN` entry."""
        self._require(KeywordKind.BOOLEAN)
        assert isinstance(self.payload, bool)
        return self.payload

    def as_int(self) -> int:
        """Return the payload of a `KeywordKind.INTEGER` entry."""
        self._require(KeywordKind.INTEGER)
        assert isinstance(self.payload, int)
        return self.payload

    def as_float(self) -> float:
        """Return the payload of a `KeywordKind.REAL` entry."""
        self._require(KeywordKind.REAL)
        assert isinstance(self.payload, float)
        return self.payload

    def as_str(self) -> str:
        """Return the payload of a `KeywordKind.STRING` entry."""
        self._require(KeywordKind.STRING)
        assert isinstance(self.payload, str)
        return self.payload

    def as_comment(self) -> str:
        """Return the text of a `KeywordKind.COMMENT` entry."""
        self._require(KeywordKind.COMMENT)
        assert isinstance(self.payload, str)
        return self.payload

    def as_time(self) -> astropy.time.Time:
        """Return the payload of a `KeywordKind.DATE` entry."""
        self._require(KeywordKind.DATE)
        assert isinstance(self.payload, astropy.time.Time)
        return self.payload

    def to_card_text(self) -> str:
        """Format this entry as an unpadded card line."""
        if self.kind is KeywordKind.COMMENT:
            return f"{self.name:<8}{self.raw}".rstrip()
        if len(self.name) > 8 or " " in self.name:
            return f"HIERARCH {self.name} = {self.raw}".rstrip()
        return f"{self.name:<8}= {self.raw}".rstrip()

    def __str__(self) -> str:
        return self.to_card_text()


def iter_cards(text: str) -> Iterator[str]:
    """Split newline-separated header text into 80-column cards.

    Parameters
    ----------
    text
        Header text with one card per line.  Lines need not be padded.

    Returns
    -------
    `~collections.abc.Iterator` [`str`]
        Cards, each right-padded with blanks to 80 columns.  Iteration stops
        at the ``END`` card, which is not yielded.

    Notes
    -----
    Lines that are already longer than 80 columns are passed through
    unchanged rather than truncated, so any text beyond column 80 is seen by
    the card grammar.  Empty lines are skipped.
    """
    for line in text.split("\n"):
        line = line.rstrip("\r")
        if not line:
            continue
        card = line.ljust(CARD_LENGTH)
        if card.startswith("END "):
            return
        yield card


def parse_card(card: str) -> KeywordValue:
    """Decode a single header card.

    Parameters
    ----------
    card
        Card text.  Shorter cards are padded to 80 columns first.

    Returns
    -------
    KeywordValue
        The typed entry.

    Raises
    ------
    MalformedCardError
        Raised if the card does not follow the ``KEYWORD = VALUE / comment``
        layout or its value does not match any supported literal.

    Notes
    -----
    ``HIERARCH`` cards are accepted; their keyword is the text between
    ``HIERARCH`` and the first ``=``, with runs of blanks collapsed to single
    spaces as in `astropy.io.fits`.
    """
    card = card.ljust(CARD_LENGTH)
    name = card[:8].strip()
    if name in COMMENTARY_KEYWORDS:
        text = card[8:].rstrip()
        return KeywordValue(name, KeywordKind.COMMENT, text, text)
    if card.startswith("HIERARCH "):
        name, sep, raw = card[9:].partition("=")
        name = " ".join(name.split())
        if not _HIERARCH_KEYWORD_RE.match(name):
            raise MalformedCardError(f"Invalid HIERARCH keyword {name!r}.", card, keyword=name)
        if not sep:
            raise MalformedCardError("Missing value indicator after HIERARCH keyword.", card, keyword=name)
        raw = raw.strip()
    else:
        if not _KEYWORD_RE.match(name):
            raise MalformedCardError(f"Invalid keyword {name!r}.", card, keyword=name)
        if card[8:10] != "= ":
            raise MalformedCardError("Missing value indicator in columns 9-10.", card, keyword=name)
        raw = card[10:].rstrip()
    try:
        value_text, comment, quoted = _split_value_field(raw)
    except ValueError as err:
        raise MalformedCardError(str(err), card, keyword=name) from err
    if quoted:
        if (time := _parse_date(value_text)) is not None:
            return KeywordValue(name, KeywordKind.DATE, raw, time, comment)
        return KeywordValue(name, KeywordKind.STRING, raw, value_text, comment)
    if not value_text:
        return KeywordValue(name, KeywordKind.NONE, raw, None, comment)
    if value_text in ("T", "F"):
        return KeywordValue(name, KeywordKind.BOOLEAN, raw, value_text == "T", comment)
    if _INTEGER_RE.match(value_text):
        return KeywordValue(name, KeywordKind.INTEGER, raw, int(value_text), comment)
    if _REAL_RE.match(value_text):
        real = float(value_text.replace("D", "E").replace("d", "e"))
        return KeywordValue(name, KeywordKind.REAL, raw, real, comment)
    if (time := _parse_date(value_text)) is not None:
        return KeywordValue(name, KeywordKind.DATE, raw, time, comment)
    raise MalformedCardError(f"Unrecognized value {value_text!r}.", card, keyword=name)


def _split_value_field(field: str) -> tuple[str, str | None, bool]:
    """Split a value field into value text, comment, and whether the value
    was a quoted string.

    Quoted strings are returned un-escaped with trailing blanks removed.
    """
    stripped = field.lstrip()
    if match := _BARE_LEGACY_DATE_RE.match(stripped):
        # The slashes of an unquoted DD/MM/YY date are not comment separators.
        date, comment = match.groups()
        return date, comment.strip() if comment is not None else None, False
    if not stripped.startswith("'"):
        value, sep, comment = stripped.partition("/")
        return value.strip(), comment.strip() if sep else None, False
    pieces: list[str] = []
    start = 1
    while True:
        end = stripped.find("'", start)
        if end < 0:
            raise ValueError("Unterminated string value.")
        pieces.append(stripped[start:end])
        if stripped[end + 1 : end + 2] == "'":
            pieces.append("'")
            start = end + 2
            continue
        break
    rest = stripped[end + 1 :].strip()
    if not rest:
        comment = None
    elif rest.startswith("/"):
        comment = rest[1:].strip()
    else:
        raise ValueError(f"Unexpected text {rest!r} after string value.")
    return "".join(pieces).rstrip(), comment, True


def _payload_matches(kind: KeywordKind, payload: object) -> bool:
    match kind:
        case KeywordKind.NONE:
            return payload is None
        case KeywordKind.BOOLEAN:
            return isinstance(payload, bool)
        case KeywordKind.INTEGER:
            return isinstance(payload, int) and not isinstance(payload, bool)
        case KeywordKind.REAL:
            return isinstance(payload, float)
        case KeywordKind.STRING | KeywordKind.COMMENT:
            return isinstance(payload, str)
        case KeywordKind.DATE:
            return isinstance(payload, astropy.time.Time)
    return False


def _parse_date(text: str) -> astropy.time.Time | None:
    """Interpret text as a FITS date literal, or return `None`."""
    if match := _LEGACY_DATE_RE.match(text):
        day, month, year = match.groups()
        text = f"19{year}-{month}-{day}"
    elif not _ISO_DATE_RE.match(text):
        return None
    try:
        return astropy.time.Time(text, format="fits", scale="utc")
    except ValueError:
        return None
