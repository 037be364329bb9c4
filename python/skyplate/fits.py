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

"""Loading of FITS headers and images.

Decoding of the FITS container itself is done by `astropy.io.fits`; this
module converts the decoded header and data units into a `.HeaderTable`, an
`.ImageMatrix` and a `.PlateScaleTransform`.  Files are located with
`lsst.resources`, so any URI it supports may be read.
"""

from __future__ import annotations

__all__ = ("FitsImage", "ImageLikeHDU", "read_fits_header")

import io
from collections.abc import Iterator
from contextlib import contextmanager
from logging import getLogger
from typing import final

import astropy.io.fits
import astropy.time
import numpy as np
from astropy.coordinates import Angle, SkyCoord

from lsst.resources import ResourcePath, ResourcePathExpression

from ._config import HeaderKeywords
from ._errors import UnsupportedDimensionalityError, UnsupportedHduError
from ._header import HeaderTable
from ._matrix import ImageMatrix
from ._render import render_grayscale
from ._transforms import PixelPosition, PlateScaleTransform

_LOG = getLogger(__name__)

type ImageLikeHDU = astropy.io.fits.PrimaryHDU | astropy.io.fits.ImageHDU | astropy.io.fits.CompImageHDU


@contextmanager
def _open_hdu_list(path: ResourcePathExpression) -> Iterator[astropy.io.fits.HDUList]:
    path = ResourcePath(path)
    stream = io.BytesIO(path.read())
    with astropy.io.fits.open(stream) as hdu_list:
        yield hdu_list


def read_fits_header(path: ResourcePathExpression, *, hdu: int | str = 0) -> HeaderTable:
    """Read just the header of one HDU of a FITS file.

    Parameters
    ----------
    path
        File to read; convertible to `lsst.resources.ResourcePath`.
    hdu, optional
        Index or ``EXTNAME`` of the HDU.

    Returns
    -------
    HeaderTable
        The parsed header.
    """
    with _open_hdu_list(path) as hdu_list:
        return HeaderTable.from_fits_header(hdu_list[hdu].header)


@final
class FitsImage:
    """A 2-d FITS image with its header, plate-scale transform and
    descriptive fields.

    Parameters
    ----------
    header
        Parsed header of the image's HDU.
    matrix
        Samples of the image.
    keywords, optional
        Names of the keywords that descriptive fields and plate-scale
        parameters are read from.

    Notes
    -----
    Instances are usually constructed with `read_fits` or `from_hdu`.  Each
    load produces a new, independent object.
    """

    def __init__(
        self, header: HeaderTable, matrix: ImageMatrix, *, keywords: HeaderKeywords = HeaderKeywords()
    ):
        self._header = header
        self._matrix = matrix
        self._transform = PlateScaleTransform.from_header(
            header, width=matrix.width, height=matrix.height, keywords=keywords
        )
        self._object_name = header.get_string(keywords.object_name)
        self._date_obs = header.get_time(keywords.date_obs)

    @classmethod
    def from_hdu(cls, hdu: ImageLikeHDU, *, keywords: HeaderKeywords = HeaderKeywords()) -> FitsImage:
        """Construct from an HDU decoded by `astropy.io.fits`.

        Parameters
        ----------
        hdu
            Primary, image or compressed-image HDU.
        keywords, optional
            Names of the keywords to read descriptive fields from.

        Raises
        ------
        UnsupportedHduError
            Raised if the HDU does not hold an image.
        UnsupportedDimensionalityError
            Raised if the HDU has no data or its data is not 2-d.
        MalformedCardError
            Raised if a header card has a value of an unsupported type.

        Notes
        -----
        The display window of the new image's matrix is initialized with
        `ImageMatrix.compute_min_max`.
        """
        if not isinstance(
            hdu, astropy.io.fits.PrimaryHDU | astropy.io.fits.ImageHDU | astropy.io.fits.CompImageHDU
        ):
            raise UnsupportedHduError(
                f"HDU {hdu.name!r} of type {type(hdu).__name__} does not hold an image."
            )
        header = HeaderTable.from_fits_header(hdu.header)
        data = hdu.data
        if data is None:
            raise UnsupportedDimensionalityError(())
        matrix = ImageMatrix.from_axis_and_samples(data.shape[::-1], np.ravel(data))
        matrix.compute_min_max()
        _LOG.debug("Loaded %s image with %d header cards.", matrix, len(header))
        return cls(header, matrix, keywords=keywords)

    @classmethod
    def read_fits(
        cls, path: ResourcePathExpression, *, hdu: int | str = 0, keywords: HeaderKeywords = HeaderKeywords()
    ) -> FitsImage:
        """Read an image from a FITS file.

        Parameters
        ----------
        path
            File to read; convertible to `lsst.resources.ResourcePath`.
        hdu, optional
            Index or ``EXTNAME`` of the HDU holding the image.
        keywords, optional
            Names of the keywords to read descriptive fields from.
        """
        with _open_hdu_list(path) as hdu_list:
            return cls.from_hdu(hdu_list[hdu], keywords=keywords)

    @property
    def header(self) -> HeaderTable:
        """The parsed header (`HeaderTable`)."""
        return self._header

    @property
    def matrix(self) -> ImageMatrix:
        """The image samples (`ImageMatrix`)."""
        return self._matrix

    @property
    def transform(self) -> PlateScaleTransform:
        """Linear pixel/sky mapping built from the header
        (`PlateScaleTransform`).
        """
        return self._transform

    @property
    def width(self) -> int:
        """Number of image columns."""
        return self._matrix.width

    @property
    def height(self) -> int:
        """Number of image rows."""
        return self._matrix.height

    @property
    def object_name(self) -> str | None:
        """Name of the observed object, if recorded."""
        return self._object_name

    @property
    def date_obs(self) -> astropy.time.Time | None:
        """Time of the observation, if recorded."""
        return self._date_obs

    def value_at(self, x: int, y: int) -> float:
        """Return the sample at a display position (see
        `ImageMatrix.value_at`).
        """
        return self._matrix.value_at(x, y)

    def pixel_to_sky(self, x: int, y: int) -> SkyCoord | None:
        """Return the sky position of a pixel (see
        `PlateScaleTransform.pixel_to_sky`).
        """
        return self._transform.pixel_to_sky(x, y)

    def sky_to_pixel(self, ra: Angle | None, dec: Angle | None) -> PixelPosition | None:
        """Return the pixel at a sky position (see
        `PlateScaleTransform.sky_to_pixel`).
        """
        return self._transform.sky_to_pixel(ra, dec)

    def render(self, min_value: float | None = None, max_value: float | None = None) -> np.ndarray:
        """Render the image as grayscale ARGB pixels (see
        `render_grayscale`).
        """
        return render_grayscale(self._matrix, min_value, max_value)

    def __str__(self) -> str:
        date_obs = self._date_obs.isot if self._date_obs is not None else None
        return f"{self._object_name} {self._transform} {date_obs}"

    def __repr__(self) -> str:
        return f"FitsImage({self._object_name!r}, {self._matrix!r})"
