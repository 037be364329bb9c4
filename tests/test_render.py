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

import unittest

import numpy as np

from skyplate import DEGENERATE_WINDOW_INTENSITY, ImageMatrix, render_grayscale, window_intensities


def _gray(value: int) -> int:
    return 0xFF000000 | (value << 16) | (value << 8) | value


class RenderTestCase(unittest.TestCase):
    """Tests for window_intensities and render_grayscale."""

    def setUp(self) -> None:
        # Storage rows are [0, 10] and [20, 30].
        self.matrix = ImageMatrix(2, 2, [0.0, 10.0, 20.0, 30.0])

    def test_linear_window(self) -> None:
        """Test scaling and the vertical flip."""
        intensities = window_intensities(self.matrix, 0.0, 30.0)
        self.assertEqual(intensities.dtype, np.uint8)
        np.testing.assert_array_equal(intensities, [[170, 255], [0, 85]])
        pixels = render_grayscale(self.matrix, 0.0, 30.0)
        self.assertEqual(pixels.dtype, np.uint32)
        self.assertEqual(
            pixels.tolist(), [_gray(170), 0xFFFFFFFF, 0xFF000000, _gray(85)]
        )

    def test_stored_window(self) -> None:
        """Test that the matrix's window is the default."""
        self.matrix.compute_min_max()
        np.testing.assert_array_equal(render_grayscale(self.matrix), render_grayscale(self.matrix, 0.0, 30.0))
        self.matrix.set_window(10.0, 20.0)
        np.testing.assert_array_equal(window_intensities(self.matrix), [[255, 255], [0, 0]])
        # Explicit bounds override the stored ones individually.
        np.testing.assert_array_equal(window_intensities(self.matrix, min_value=0.0), [[255, 255], [0, 128]])

    def test_clipping(self) -> None:
        """Test that samples outside the window saturate."""
        np.testing.assert_array_equal(window_intensities(self.matrix, 5.0, 25.0), [[191, 255], [0, 64]])

    def test_rounding(self) -> None:
        """Test that scaled values are rounded half up."""
        matrix = ImageMatrix(3, 1, [0.0, 1.0, 2.0])
        np.testing.assert_array_equal(window_intensities(matrix, 0.0, 2.0), [[0, 128, 255]])

    def test_degenerate_window(self) -> None:
        """Test a window with equal bounds."""
        np.testing.assert_array_equal(
            window_intensities(self.matrix, 10.0, 10.0), [[255, 255], [0, DEGENERATE_WINDOW_INTENSITY]]
        )
        constant = ImageMatrix(2, 2, [4.0] * 4)
        constant.compute_min_max()
        self.assertEqual(render_grayscale(constant).tolist(), [_gray(128)] * 4)

    def test_blank_samples(self) -> None:
        """Test that NaN samples render black."""
        matrix = ImageMatrix(2, 1, [np.nan, 3.0])
        matrix.compute_min_max()
        self.assertEqual(render_grayscale(matrix).tolist(), [0xFF000000, _gray(128)])

    def test_opaque(self) -> None:
        """Test that every pixel has full alpha."""
        matrix = ImageMatrix(4, 4, np.linspace(-1.0, 1.0, 16))
        pixels = render_grayscale(matrix, -1.0, 1.0)
        self.assertEqual(pixels.size, 16)
        self.assertTrue(np.all((pixels >> np.uint32(24)) == 0xFF))

    def test_missing_window(self) -> None:
        """Test that a window is required."""
        with self.assertRaises(ValueError):
            render_grayscale(self.matrix)
        with self.assertRaises(ValueError):
            render_grayscale(self.matrix, 0.0)
        with self.assertRaises(ValueError):
            render_grayscale(self.matrix, 30.0, 0.0)


if __name__ == "__main__":
    unittest.main()
