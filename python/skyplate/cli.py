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

__all__ = ("main",)

import click

from ._errors import FitsContentError
from .fits import FitsImage, read_fits_header


@click.command("skyplate-header")
@click.argument("path")
@click.option("--hdu", default="0", show_default=True, help="Index or EXTNAME of the HDU to read.")
@click.option("--summary", is_flag=True, help="Print a one-line description of the image instead.")
@click.option(
    "--pixel", nargs=2, type=int, default=None, metavar="X Y", help="Print the sky position of a pixel."
)
def main(path: str, hdu: str, summary: bool, pixel: tuple[int, int] | None) -> None:
    """Print the header of the FITS file at PATH, one card per line."""
    hdu_key: int | str = int(hdu) if hdu.isdigit() else hdu
    try:
        if not summary and pixel is None:
            click.echo(read_fits_header(path, hdu=hdu_key).to_text())
            return
        image = FitsImage.read_fits(path, hdu=hdu_key)
    except (FitsContentError, OSError, KeyError, IndexError) as err:
        raise click.ClickException(f"Failed to load {path}: {err}") from err
    if summary:
        click.echo(str(image))
    if pixel is not None:
        sky = image.pixel_to_sky(*pixel)
        if sky is None:
            click.echo(f"{pixel[0]} {pixel[1]}: outside frame or no field center")
        else:
            click.echo(f"{pixel[0]} {pixel[1]}: {sky.to_string('hmsdms', sep=' ')}")


if __name__ == "__main__":
    main()
