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

__all__ = (
    "DataSizeMismatchError",
    "FitsContentError",
    "MalformedCardError",
    "MissingKeywordError",
    "UnsupportedDimensionalityError",
    "UnsupportedHduError",
)

from collections.abc import Sequence


class FitsContentError(RuntimeError):
    """Base class for errors raised when the content of a FITS header or data
    unit cannot be interpreted.
    """


class MalformedCardError(FitsContentError):
    """Exception raised when a header card does not match any recognized
    value grammar.

    Parameters
    ----------
    message
        Description of the problem.
    card
        Text of the offending card.
    index, optional
        Zero-based position of the card in the header, if known.
    keyword, optional
        Keyword of the offending card, if it could be extracted.
    """

    def __init__(self, message: str, card: str, index: int | None = None, keyword: str | None = None):
        self.card = card
        self.index = index
        self.keyword = keyword
        super().__init__(message)

    def with_index(self, index: int) -> MalformedCardError:
        """Return a copy of this error that records the card's position."""
        return MalformedCardError(
            f"Card {index} ({self.keyword or '<no keyword>'}): {self.args[0]}",
            self.card,
            index=index,
            keyword=self.keyword,
        )


class UnsupportedDimensionalityError(FitsContentError):
    """Exception raised when a data unit is not a 2-d image."""

    def __init__(self, axis_lengths: Sequence[int]):
        self.axis_lengths = tuple(axis_lengths)
        super().__init__(
            f"Only 2-d images are supported; data unit has {len(self.axis_lengths)} "
            f"axes with lengths {list(self.axis_lengths)}."
        )


class DataSizeMismatchError(FitsContentError):
    """Exception raised when the number of samples does not agree with the
    declared axis lengths.
    """

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected} samples from the axis lengths; got {actual}.")


class MissingKeywordError(FitsContentError, KeyError):
    """Exception raised by strict header accessors when a keyword is not
    present.
    """

    def __init__(self, keyword: str):
        self.keyword = keyword
        super().__init__(f"Keyword {keyword!r} is not present in the header.")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return str(self.args[0])


class UnsupportedHduError(FitsContentError):
    """Exception raised when an HDU does not hold image data."""
