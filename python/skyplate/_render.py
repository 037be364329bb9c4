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

"""Grayscale windowing of image samples for display."""

from __future__ import annotations

__all__ = ("DEGENERATE_WINDOW_INTENSITY", "render_grayscale", "window_intensities")

import numpy as np

from ._matrix import ImageMatrix

DEGENERATE_WINDOW_INTENSITY = 128
"""Intensity used for in-window samples when the window has zero width."""


def _resolve_window(
    matrix: ImageMatrix, min_value: float | None, max_value: float | None
) -> tuple[float, float]:
    if min_value is None:
        min_value = matrix.min_value
    if max_value is None:
        max_value = matrix.max_value
    if min_value is None or max_value is None:
        raise ValueError(
            "No display window; call ImageMatrix.compute_min_max or pass explicit bounds."
        )
    if max_value < min_value:
        raise ValueError(f"Window maximum {max_value} is less than minimum {min_value}.")
    return float(min_value), float(max_value)


def window_intensities(
    matrix: ImageMatrix, min_value: float | None = None, max_value: float | None = None
) -> np.ndarray:
    """Window the samples of an image into 8-bit intensities.

    Parameters
    ----------
    matrix
        Image to render.
    min_value, optional
        Samples below this are black.  Defaults to ``matrix.min_value``.
    max_value, optional
        Samples above this are white.  Defaults to ``matrix.max_value``.

    Returns
    -------
    numpy.ndarray
        ``(height, width)`` `numpy.uint8` array, flipped so that row 0 is the
        last storage row (north up).

    Notes
    -----
    In-window samples are scaled linearly and rounded half up.  When
    ``min_value == max_value`` in-window samples are given
    `DEGENERATE_WINDOW_INTENSITY`.  NaN samples are black.
    """
    lo, hi = _resolve_window(matrix, min_value, max_value)
    samples = matrix.array
    if hi > lo:
        scaled = np.floor((samples - lo) * (255.0 / (hi - lo)) + 0.5)
    else:
        scaled = np.full(samples.shape, float(DEGENERATE_WINDOW_INTENSITY))
    scaled[samples < lo] = 0.0
    scaled[samples > hi] = 255.0
    scaled[np.isnan(samples)] = 0.0
    return np.clip(scaled, 0, 255).astype(np.uint8)[::-1, :]


def render_grayscale(
    matrix: ImageMatrix, min_value: float | None = None, max_value: float | None = None
) -> np.ndarray:
    """Render an image as opaque grayscale ARGB pixels.

    Parameters
    ----------
    matrix
        Image to render.
    min_value, optional
        Samples below this are black.  Defaults to ``matrix.min_value``.
    max_value, optional
        Samples above this are white.  Defaults to ``matrix.max_value``.

    Returns
    -------
    numpy.ndarray
        Flat `numpy.uint32` array of ``width * height`` ``0xAARRGGBB``
        values in display order, with alpha always 255.  Storage row 0 is
        the last output row.

    Raises
    ------
    ValueError
        Raised if no window is given or stored on the matrix, or if
        ``max_value < min_value``.

    See Also
    --------
    window_intensities
    """
    value = window_intensities(matrix, min_value, max_value).astype(np.uint32).ravel()
    return np.uint32(0xFF000000) | (value << np.uint32(16)) | (value << np.uint32(8)) | value
