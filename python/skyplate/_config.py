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

__all__ = ("HeaderKeywords",)

import pydantic


class HeaderKeywords(pydantic.BaseModel):
    """Names of the header keywords that descriptive fields and plate-scale
    parameters are read from.
    """

    field_center_ra: str = pydantic.Field(
        default="FCRA",
        description=(
            "Right ascension of the field center, as a sexagesimal string "
            "('HH MM SS.s') or a number of degrees."
        ),
    )
    field_center_dec: str = pydantic.Field(
        default="FCDEC",
        description=(
            "Declination of the field center, as a sexagesimal string "
            "('+DD MM SS.s') or a number of degrees."
        ),
    )
    x_plate_scale: str = pydantic.Field(default="XPS", description="Arcseconds per pixel along x.")
    y_plate_scale: str = pydantic.Field(default="YPS", description="Arcseconds per pixel along y.")
    object_name: str = pydantic.Field(default="OBJECT", description="Name of the observed object.")
    date_obs: str = pydantic.Field(default="DATE-OBS", description="Time of the observation.")

    model_config = pydantic.ConfigDict(frozen=True)
