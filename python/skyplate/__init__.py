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

"""Typed FITS header cards, 2-d image samples, grayscale rendering and a
linear plate-scale mapping between pixels and the sky.
"""

from ._cards import *
from ._config import *
from ._errors import *
from ._header import *
from ._matrix import *
from ._render import *
from ._transforms import *
