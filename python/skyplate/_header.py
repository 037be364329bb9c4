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

from __future__ import annotations

__all__ = ("HeaderTable", "parse_header")

import numbers
from collections.abc import Iterable, Iterator
from logging import getLogger
from typing import Any

import astropy.io.fits
import astropy.time
import numpy as np

from ._cards import (
    CARD_LENGTH,
    COMMENTARY_KEYWORDS,
    KeywordKind,
    KeywordValue,
    _parse_date,
    iter_cards,
    parse_card,
)
from ._errors import MalformedCardError, MissingKeywordError

_LOG = getLogger(__name__)


class HeaderTable:
    """An ordered collection of decoded header entries.

    Parameters
    ----------
    entries, optional
        Initial entries, in card order.

    Notes
    -----
    Keyword names need not be unique (``COMMENT`` and ``HISTORY`` usually
    repeat); `lookup` and the accessor methods always use the first entry with
    a given name.  Tables are append-only until `freeze` is called, after which
    they are read-only.

    Two families of typed accessors are provided.  The ``get_*`` methods are
    lenient: they return `None`, ``0``, ``0.0`` or `False` when the keyword is
    missing or holds a value of another kind.  The ``require_*`` methods raise
    `MissingKeywordError` for missing keywords and `TypeError` for kind
    mismatches.
    """

    def __init__(self, entries: Iterable[KeywordValue] = ()):
        self._entries: list[KeywordValue] = []
        self._first: dict[str, KeywordValue] = {}
        self._frozen = False
        for entry in entries:
            self.append(entry)

    @classmethod
    def from_fits_header(cls, header: astropy.io.fits.Header) -> HeaderTable:
        """Build a table from a header decoded by `astropy.io.fits`.

        Parameters
        ----------
        header
            Astropy header object.

        Returns
        -------
        HeaderTable
            Frozen table with one entry per card, in card order.
        """
        table = cls()
        for index, card in enumerate(header.cards):
            try:
                table.append(_entry_from_astropy_card(card))
            except MalformedCardError as err:
                raise err.with_index(index) from err
        table.freeze()
        return table

    @property
    def entries(self) -> tuple[KeywordValue, ...]:
        """All entries, in card order."""
        return tuple(self._entries)

    @property
    def frozen(self) -> bool:
        """Whether `append` is still allowed."""
        return self._frozen

    def append(self, entry: KeywordValue) -> None:
        """Add an entry to the end of the table."""
        if self._frozen:
            raise RuntimeError("Cannot append to a frozen header table.")
        self._entries.append(entry)
        self._first.setdefault(entry.name, entry)

    def freeze(self) -> None:
        """Disallow any further modification."""
        self._frozen = True

    def lookup(self, name: str) -> KeywordValue | None:
        """Return the first entry with the given keyword, or `None`.

        Matching is exact and case-sensitive.
        """
        return self._first.get(name)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[KeywordValue]:
        return iter(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._first

    def get_string(self, name: str) -> str | None:
        """Return a string value, or `None`."""
        return self._lenient(name, KeywordKind.STRING, None)

    def get_int(self, name: str) -> int:
        """Return an integer value, or ``0``."""
        return self._lenient(name, KeywordKind.INTEGER, 0)

    def get_float(self, name: str) -> float:
        """Return a real value, or ``0.0``."""
        return self._lenient(name, KeywordKind.REAL, 0.0)

    def get_bool(self, name: str) -> bool:
        """Return a boolean value, or `False`."""
        return self._lenient(name, KeywordKind.BOOLEAN, False)

    def get_time(self, name: str) -> astropy.time.Time | None:
        """Return a date value, or `None`."""
        return self._lenient(name, KeywordKind.DATE, None)

    def require_string(self, name: str) -> str:
        """Return a string value, raising if it is missing."""
        return self._strict(name).as_str()

    def require_int(self, name: str) -> int:
        """Return an integer value, raising if it is missing."""
        return self._strict(name).as_int()

    def require_float(self, name: str) -> float:
        """Return a real value, raising if it is missing."""
        return self._strict(name).as_float()

    def require_bool(self, name: str) -> bool:
        """Return a boolean value, raising if it is missing."""
        return self._strict(name).as_bool()

    def require_time(self, name: str) -> astropy.time.Time:
        """Return a date value, raising if it is missing."""
        return self._strict(name).as_time()

    def to_text(self) -> str:
        """Format the table as newline-separated, unpadded card lines
        terminated by an ``END`` card.

        The result can be read back with `parse_header`.
        """
        return "\n".join([entry.to_card_text() for entry in self._entries] + ["END"])

    def _lenient(self, name: str, kind: KeywordKind, default: Any) -> Any:
        entry = self._first.get(name)
        if entry is None or entry.kind is not kind:
            return default
        return entry.value

    def _strict(self, name: str) -> KeywordValue:
        entry = self._first.get(name)
        if entry is None:
            raise MissingKeywordError(name)
        return entry

    def __str__(self) -> str:
        return "\n".join(entry.to_card_text() for entry in self._entries)

    def __repr__(self) -> str:
        return f"HeaderTable(<{len(self._entries)} entries>)"


def parse_header(text: str) -> HeaderTable:
    """Parse newline-separated header text into a `HeaderTable`.

    Parameters
    ----------
    text
        Header text, one card per line, optionally terminated by ``END``.
        Lines are padded to 80 columns before parsing.

    Returns
    -------
    HeaderTable
        Frozen table holding every card before ``END``.

    Raises
    ------
    MalformedCardError
        Raised for the first card that cannot be parsed; its ``index``
        attribute gives the card's position.
    """
    table = HeaderTable()
    for index, card in enumerate(iter_cards(text)):
        try:
            entry = parse_card(card)
        except MalformedCardError as err:
            raise err.with_index(index) from err
        table.append(entry)
    table.freeze()
    _LOG.debug("Parsed %d header cards.", len(table))
    return table


def _entry_from_astropy_card(card: astropy.io.fits.Card) -> KeywordValue:
    """Convert a card already decoded by Astropy into a `KeywordValue`."""
    image = card.image
    name = card.keyword
    if name in COMMENTARY_KEYWORDS:
        text = image[8:].rstrip()
        return KeywordValue(name, KeywordKind.COMMENT, text, str(card.value))
    raw = _value_field(card)
    comment = card.comment or None
    value = card.value
    # Values assigned in memory may still be numpy scalars.
    match value:
        case bool() | np.bool_():
            return KeywordValue(name, KeywordKind.BOOLEAN, raw, bool(value), comment)
        case numbers.Integral():
            return KeywordValue(name, KeywordKind.INTEGER, raw, int(value), comment)
        case numbers.Real():
            return KeywordValue(name, KeywordKind.REAL, raw, float(value), comment)
        case str():
            if (time := _parse_date(value.rstrip())) is not None:
                return KeywordValue(name, KeywordKind.DATE, raw, time, comment)
            return KeywordValue(name, KeywordKind.STRING, raw, value.rstrip(), comment)
        case None | astropy.io.fits.card.Undefined():
            return KeywordValue(name, KeywordKind.NONE, raw, None, comment)
    raise MalformedCardError(f"Unsupported value type {type(value).__name__}.", image, keyword=name)


def _value_field(card: astropy.io.fits.Card) -> str:
    """Return the value field of a card as it would appear on a single line
    after the value indicator.
    """
    image = card.image
    if len(image) > CARD_LENGTH:
        # A long string continued over CONTINUE cards; rejoin it into one
        # (overlong) quoted value.
        field = "'" + str(card.value).replace("'", "''") + "'"
        if card.comment:
            field = f"{field} / {card.comment}"
        return field
    if image.startswith("HIERARCH "):
        return image.partition("=")[2].strip()
    return image[10:].rstrip()
