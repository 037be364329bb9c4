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

__all__ = ("PixelPosition", "PlateScaleSerializationModel", "PlateScaleTransform")

import math
from logging import getLogger
from typing import NamedTuple, final

import astropy.units as u
import pydantic
from astropy.coordinates import Angle, Latitude, Longitude, SkyCoord

from ._cards import KeywordKind
from ._config import HeaderKeywords
from ._header import HeaderTable

_LOG = getLogger(__name__)

_MAX_DEC_ARCSEC = 90.0 * 3600.0


class PixelPosition(NamedTuple):
    """Integer pixel coordinates."""

    x: int
    y: int


@final
class PlateScaleTransform:
    """A linear mapping between pixel coordinates and the sky.

    Parameters
    ----------
    width
        Number of image columns.
    height
        Number of image rows.
    x_scale
        Arcseconds of right ascension per pixel along x.
    y_scale
        Arcseconds of declination per pixel along y.
    ra, optional
        Right ascension of the field center.
    dec, optional
        Declination of the field center.

    Notes
    -----
    Pixel offsets from the image center ``(width // 2, height // 2)`` are
    multiplied by the plate scale and added to the field center, with
    increasing ``x`` decreasing right ascension and increasing ``y``
    decreasing declination.  No projection or spherical correction is
    applied, so positions are only accurate near the field center; use
    `field_radius` to judge how far from the center an image extends.

    Neither `pixel_to_sky` nor `sky_to_pixel` raise for positions they
    cannot map; they return `None` instead.
    """

    def __init__(
        self,
        *,
        width: int,
        height: int,
        x_scale: float,
        y_scale: float,
        ra: Angle | u.Quantity | None = None,
        dec: Angle | u.Quantity | None = None,
    ):
        self._width = int(width)
        self._height = int(height)
        self._x_scale = float(x_scale)
        self._y_scale = float(y_scale)
        self._ra = Longitude(ra) if ra is not None else None
        self._dec = Latitude(dec) if dec is not None else None

    @classmethod
    def from_header(
        cls,
        header: HeaderTable,
        *,
        width: int,
        height: int,
        keywords: HeaderKeywords = HeaderKeywords(),
    ) -> PlateScaleTransform:
        """Read the field center and plate scale from a header.

        Parameters
        ----------
        header
            Parsed header.
        width
            Number of image columns, from the data unit.
        height
            Number of image rows, from the data unit.
        keywords, optional
            Names of the keywords to read.

        Notes
        -----
        Missing plate-scale keywords give a scale of zero, and a missing or
        unreadable field center leaves it unset; neither is an error.
        """
        return cls(
            width=width,
            height=height,
            x_scale=_read_scale(header, keywords.x_plate_scale),
            y_scale=_read_scale(header, keywords.y_plate_scale),
            ra=_read_angle(header, keywords.field_center_ra, u.hourangle),
            dec=_read_angle(header, keywords.field_center_dec, u.deg, latitude=True),
        )

    @property
    def width(self) -> int:
        """Number of image columns."""
        return self._width

    @property
    def height(self) -> int:
        """Number of image rows."""
        return self._height

    @property
    def x_scale(self) -> float:
        """Arcseconds per pixel along x."""
        return self._x_scale

    @property
    def y_scale(self) -> float:
        """Arcseconds per pixel along y."""
        return self._y_scale

    @property
    def ra(self) -> Longitude | None:
        """Right ascension of the field center, if known."""
        return self._ra

    @property
    def dec(self) -> Latitude | None:
        """Declination of the field center, if known."""
        return self._dec

    @property
    def field_center(self) -> SkyCoord | None:
        """The field center, if known."""
        if self._ra is None or self._dec is None:
            return None
        return SkyCoord(ra=self._ra, dec=self._dec, frame="icrs")

    @property
    def field_size(self) -> tuple[float, float]:
        """Extent of the image along x and y, in arcseconds."""
        return self._width * self._x_scale, self._height * self._y_scale

    def field_radius(self) -> float:
        """Return the distance from the field center to a corner, in
        arcseconds.
        """
        return math.hypot(*self.field_size)

    def pixel_to_sky(self, x: int, y: int) -> SkyCoord | None:
        """Return the sky position of a pixel.

        Parameters
        ----------
        x
            Column, in ``[0, width]``.
        y
            Row, in ``[0, height]``.

        Returns
        -------
        astropy.coordinates.SkyCoord or None
            ICRS position, or `None` if the pixel is outside the image, the
            field center is not known, or the position would lie beyond a
            celestial pole.
        """
        if not (0 <= x <= self._width and 0 <= y <= self._height):
            return None
        if self._ra is None or self._dec is None:
            return None
        ra_arcsec = self._ra.to_value(u.arcsec) + (self._width // 2 - x) * self._x_scale
        dec_arcsec = self._dec.to_value(u.arcsec) + (self._height // 2 - y) * self._y_scale
        if abs(dec_arcsec) > _MAX_DEC_ARCSEC:
            return None
        return SkyCoord(
            ra=Longitude(ra_arcsec * u.arcsec), dec=Latitude(dec_arcsec * u.arcsec), frame="icrs"
        )

    def sky_to_pixel(
        self, ra: Angle | u.Quantity | None, dec: Angle | u.Quantity | None
    ) -> PixelPosition | None:
        """Return the pixel at a sky position.

        Parameters
        ----------
        ra
            Right ascension.
        dec
            Declination.

        Returns
        -------
        PixelPosition or None
            Pixel coordinates truncated toward zero, or `None` if either
            coordinate or the field center is unknown or the plate scale is
            zero.  The result is not checked against the image bounds.
        """
        if ra is None or dec is None or self._ra is None or self._dec is None:
            return None
        if self._x_scale == 0.0 or self._y_scale == 0.0:
            return None
        ra_offset = Angle(self._ra - Angle(ra)).wrap_at(180 * u.deg).to_value(u.arcsec)
        dec_offset = Angle(self._dec - Angle(dec)).to_value(u.arcsec)
        return PixelPosition(
            x=int(ra_offset / self._x_scale + self._width // 2),
            y=int(dec_offset / self._y_scale + self._height // 2),
        )

    def serialize(self) -> PlateScaleSerializationModel:
        """Return the serializable form of this transform."""
        return PlateScaleSerializationModel(
            width=self._width,
            height=self._height,
            x_scale=self._x_scale,
            y_scale=self._y_scale,
            ra=self._ra.to_value(u.deg) if self._ra is not None else None,
            dec=self._dec.to_value(u.deg) if self._dec is not None else None,
        )

    @staticmethod
    def deserialize(model: PlateScaleSerializationModel) -> PlateScaleTransform:
        """Construct a transform from its serialized form."""
        return PlateScaleTransform(
            width=model.width,
            height=model.height,
            x_scale=model.x_scale,
            y_scale=model.y_scale,
            ra=model.ra * u.deg if model.ra is not None else None,
            dec=model.dec * u.deg if model.dec is not None else None,
        )

    def __str__(self) -> str:
        ra = self._ra.to_string(unit=u.hourangle, sep=" ") if self._ra is not None else None
        dec = self._dec.to_string(unit=u.deg, sep=" ", alwayssign=True) if self._dec is not None else None
        return f"{ra} {dec} X:{self._width} * {self._x_scale} Y:{self._height} * {self._y_scale}"

    def __repr__(self) -> str:
        return (
            f"PlateScaleTransform(width={self._width}, height={self._height}, "
            f"x_scale={self._x_scale!r}, y_scale={self._y_scale!r}, ra={self._ra!r}, dec={self._dec!r})"
        )


class PlateScaleSerializationModel(pydantic.BaseModel):
    """Serialization model for plate-scale transforms."""

    width: int = pydantic.Field(description="Number of image columns.")
    height: int = pydantic.Field(description="Number of image rows.")
    x_scale: float = pydantic.Field(description="Arcseconds per pixel along x.")
    y_scale: float = pydantic.Field(description="Arcseconds per pixel along y.")
    ra: float | None = pydantic.Field(default=None, description="Field center right ascension (degrees).")
    dec: float | None = pydantic.Field(default=None, description="Field center declination (degrees).")


def _read_scale(header: HeaderTable, name: str) -> float:
    entry = header.lookup(name)
    if entry is None:
        return 0.0
    match entry.kind:
        case KeywordKind.REAL:
            return entry.as_float()
        case KeywordKind.INTEGER:
            return float(entry.as_int())
    _LOG.warning("Ignoring plate scale %s with non-numeric value %r.", name, entry.raw)
    return 0.0


def _read_angle(header: HeaderTable, name: str, unit: u.UnitBase, latitude: bool = False) -> Angle | None:
    entry = header.lookup(name)
    if entry is None:
        return None
    try:
        match entry.kind:
            case KeywordKind.STRING:
                angle = Angle(entry.as_str(), unit=unit)
            case KeywordKind.REAL:
                angle = Angle(entry.as_float(), unit=u.deg)
            case KeywordKind.INTEGER:
                angle = Angle(entry.as_int(), unit=u.deg)
            case _:
                _LOG.warning("Ignoring field center %s with %s value.", name, entry.kind)
                return None
        return Latitude(angle) if latitude else angle
    except ValueError as err:
        _LOG.warning("Could not interpret %s=%r as an angle: %s", name, entry.raw, err)
        return None
