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

from skyplate import DataSizeMismatchError, ImageMatrix, UnsupportedDimensionalityError


class ImageMatrixTestCase(unittest.TestCase):
    """Tests for ImageMatrix."""

    def setUp(self) -> None:
        # Storage rows are [0, 1, 2] and [3, 4, 5].
        self.matrix = ImageMatrix.from_axis_and_samples([3, 2], range(6))

    def test_construction(self) -> None:
        """Test dimensions and sample storage."""
        self.assertEqual(self.matrix.width, 3)
        self.assertEqual(self.matrix.height, 2)
        self.assertEqual(self.matrix.samples.dtype, np.float64)
        np.testing.assert_array_equal(self.matrix.samples, np.arange(6.0))
        np.testing.assert_array_equal(self.matrix.array, [[0.0, 1.0, 2.0], [3.0, 4.0, 5.0]])
        self.assertIsNone(self.matrix.min_value)
        self.assertIsNone(self.matrix.max_value)
        self.assertEqual(str(self.matrix), "ImageMatrix(3x2)")

    def test_read_only(self) -> None:
        """Test that samples cannot be modified in place."""
        with self.assertRaises(ValueError):
            self.matrix.samples[0] = 10.0
        with self.assertRaises(ValueError):
            self.matrix.array[0, 0] = 10.0

    def test_samples_copied(self) -> None:
        """Test that the matrix does not alias its input."""
        data = np.zeros(4, dtype=np.float32)
        matrix = ImageMatrix(2, 2, data)
        data[0] = 5.0
        self.assertEqual(matrix.samples[0], 0.0)

    def test_size_mismatch(self) -> None:
        """Test that the sample count must match the axis lengths."""
        with self.assertRaises(DataSizeMismatchError) as cm:
            ImageMatrix.from_axis_and_samples([10, 10], np.zeros(99))
        self.assertEqual(cm.exception.expected, 100)
        self.assertEqual(cm.exception.actual, 99)

    def test_dimensionality(self) -> None:
        """Test that only 2-d data is accepted."""
        for axes in ([6], [1, 2, 3], []):
            with self.subTest(axes=axes):
                with self.assertRaises(UnsupportedDimensionalityError) as cm:
                    ImageMatrix.from_axis_and_samples(axes, np.zeros(6))
                self.assertEqual(cm.exception.axis_lengths, tuple(axes))
        with self.assertRaises(UnsupportedDimensionalityError):
            ImageMatrix.from_array(np.zeros((2, 3, 4)))

    def test_nonpositive_dimensions(self) -> None:
        """Test that empty images are rejected."""
        with self.assertRaises(ValueError):
            ImageMatrix(0, 4, [])

    def test_from_array(self) -> None:
        """Test construction from a (height, width) array."""
        matrix = ImageMatrix.from_array(np.arange(6, dtype=np.int16).reshape(2, 3))
        self.assertEqual((matrix.width, matrix.height), (3, 2))
        np.testing.assert_array_equal(matrix.samples, self.matrix.samples)

    def test_min_max(self) -> None:
        """Test computing the display window."""
        self.assertEqual(self.matrix.compute_min_max(), (0.0, 5.0))
        self.assertEqual((self.matrix.min_value, self.matrix.max_value), (0.0, 5.0))
        constant = ImageMatrix(2, 2, [7.0] * 4)
        self.assertEqual(constant.compute_min_max(), (7.0, 7.0))

    def test_min_max_blanks(self) -> None:
        """Test that NaN samples do not affect the display window."""
        matrix = ImageMatrix(2, 2, [np.nan, 1.0, -2.0, np.nan])
        self.assertEqual(matrix.compute_min_max(), (-2.0, 1.0))
        blank = ImageMatrix(2, 1, [np.nan, np.nan])
        self.assertEqual(blank.compute_min_max(), (0.0, 0.0))

    def test_set_window(self) -> None:
        """Test overriding the display window."""
        self.matrix.set_window(1, 3)
        self.assertEqual((self.matrix.min_value, self.matrix.max_value), (1.0, 3.0))
        self.matrix.set_window(2.0, 2.0)
        with self.assertRaises(ValueError):
            self.matrix.set_window(3.0, 1.0)

    def test_value_at(self) -> None:
        """Test display-order sample access."""
        # Display row 0 is the last storage row.
        self.assertEqual(self.matrix.value_at(0, 0), 3.0)
        self.assertEqual(self.matrix.value_at(2, 0), 5.0)
        self.assertEqual(self.matrix.value_at(0, 1), 0.0)
        self.assertEqual(self.matrix.value_at(2, 1), 2.0)

    def test_value_at_out_of_range(self) -> None:
        """Test that positions outside the image read as zero."""
        matrix = ImageMatrix(2, 2, [5.0] * 4)
        for x, y in [(-1, 0), (0, -1), (2, 0), (0, 2), (100, 100)]:
            with self.subTest(x=x, y=y):
                self.assertEqual(matrix.value_at(x, y), 0.0)


if __name__ == "__main__":
    unittest.main()
