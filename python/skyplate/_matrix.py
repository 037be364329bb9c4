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

__all__ = ("ImageMatrix",)

from collections.abc import Sequence
from typing import final

import numpy as np
import numpy.typing as npt

from ._errors import DataSizeMismatchError, UnsupportedDimensionalityError


@final
class ImageMatrix:
    """A single 2-d plane of samples extracted from a FITS data unit.

    Parameters
    ----------
    width
        Number of columns (``NAXIS1``).
    height
        Number of rows (``NAXIS2``).
    samples
        Flattened samples in storage order; must have ``width * height``
        elements.

    Notes
    -----
    ``samples[y * width + x]`` is the value at column ``x`` of storage row
    ``y``.  Storage row 0 is the first row in the file, which is the *bottom*
    row of a north-up display; `value_at` and the renderer apply the flip.

    The display window (`min_value`, `max_value`) is unset until
    `compute_min_max` or `set_window` is called.
    """

    def __init__(self, width: int, height: int, samples: npt.ArrayLike):
        width = int(width)
        height = int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive; got {width}x{height}.")
        array = np.array(samples, dtype=np.float64).ravel()
        if array.size != width * height:
            raise DataSizeMismatchError(width * height, array.size)
        array.flags.writeable = False
        self._width = width
        self._height = height
        self._samples = array
        self._min_value: float | None = None
        self._max_value: float | None = None

    @classmethod
    def from_axis_and_samples(cls, axis_lengths: Sequence[int], flat_samples: npt.ArrayLike) -> ImageMatrix:
        """Construct from a data unit's axis lengths and flattened samples.

        Parameters
        ----------
        axis_lengths
            Length of each axis, fastest-varying first (``NAXIS1``,
            ``NAXIS2``, ...).
        flat_samples
            All samples of the data unit, in storage order.

        Raises
        ------
        UnsupportedDimensionalityError
            Raised if there are not exactly two axes.
        DataSizeMismatchError
            Raised if the number of samples is not the product of the axis
            lengths.
        """
        if len(axis_lengths) != 2:
            raise UnsupportedDimensionalityError(axis_lengths)
        width, height = axis_lengths
        return cls(width, height, flat_samples)

    @classmethod
    def from_array(cls, array: np.ndarray) -> ImageMatrix:
        """Construct from a 2-d array indexed ``[row, column]`` in storage
        order, as returned by `astropy.io.fits`.
        """
        if array.ndim != 2:
            raise UnsupportedDimensionalityError(array.shape[::-1])
        height, width = array.shape
        return cls(width, height, array)

    @property
    def width(self) -> int:
        """Number of columns."""
        return self._width

    @property
    def height(self) -> int:
        """Number of rows."""
        return self._height

    @property
    def samples(self) -> np.ndarray:
        """Read-only flattened samples in storage order."""
        return self._samples

    @property
    def array(self) -> np.ndarray:
        """Read-only ``(height, width)`` view of the samples in storage
        order.
        """
        return self._samples.reshape(self._height, self._width)

    @property
    def min_value(self) -> float | None:
        """Lower bound of the display window, or `None` if unset."""
        return self._min_value

    @property
    def max_value(self) -> float | None:
        """Upper bound of the display window, or `None` if unset."""
        return self._max_value

    def compute_min_max(self) -> tuple[float, float]:
        """Set the display window to the range of the samples.

        Returns
        -------
        min_value : `float`
            Smallest finite sample.
        max_value : `float`
            Largest finite sample.

        Notes
        -----
        Non-finite samples (e.g. NaN blanks) are ignored.  If there are no
        finite samples at all, the window is ``(0.0, 0.0)``.
        """
        finite = self._samples[np.isfinite(self._samples)]
        if finite.size == 0:
            self._min_value, self._max_value = 0.0, 0.0
        else:
            self._min_value = float(finite.min())
            self._max_value = float(finite.max())
        return self._min_value, self._max_value

    def set_window(self, min_value: float, max_value: float) -> None:
        """Override the display window."""
        if min_value > max_value:
            raise ValueError(f"Window minimum {min_value} is greater than maximum {max_value}.")
        self._min_value = float(min_value)
        self._max_value = float(max_value)

    def value_at(self, x: int, y: int) -> float:
        """Return the sample at a display position.

        Parameters
        ----------
        x
            Column.
        y
            Row on the north-up display, i.e. counted from the *last* storage
            row.

        Returns
        -------
        float
            The sample, or ``0.0`` if the position is outside the image.
        """
        if not (0 <= x < self._width and 0 <= y < self._height):
            return 0.0
        return float(self._samples[(self._height - 1 - y) * self._width + x])

    def __str__(self) -> str:
        return f"ImageMatrix({self._width}x{self._height})"

    def __repr__(self) -> str:
        return (
            f"ImageMatrix(width={self._width}, height={self._height}, "
            f"min_value={self._min_value!r}, max_value={self._max_value!r})"
        )
