"""Multichannel TIFF loading and calibration extraction via tifffile."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import tifffile
from defusedxml import ElementTree as ET

from neurodeg.core.config import AnalysisConfig
from neurodeg.core.exceptions import ImageFormatError
from neurodeg.core.models import NEURITE_ROLE, SOMA_ROLE, CalibratedRaster, RasterStack

logger = logging.getLogger(__name__)

_MICRON_UNITS = ("µm", "um", "micron", "microns", "\\u00B5m")


@dataclass(frozen=True)
class ImageInfo:
    """Structure of a source image, read without pixel data."""

    path: Path
    shape: tuple[int, ...]
    axes: str
    dtype: str
    channel_count: int
    pixel_size: float
    pixel_unit: str


def read_image_info(path: Path) -> ImageInfo:
    """Read and validate the structure of a multichannel TIFF.

    Args:
        path: Path to the TIFF file.

    Returns:
        ImageInfo with shape, axes, dtype, channel count and calibration.

    Raises:
        ImageFormatError: If the file cannot be read, is not multichannel,
            or has a non-numeric pixel type.
    """
    path = Path(path)
    try:
        with tifffile.TiffFile(str(path)) as tif:
            series = tif.series[0]
            shape = tuple(int(s) for s in series.shape)
            axes = str(series.axes)
            dtype = np.dtype(series.dtype)
            pixel_size, unit = _extract_pixel_size(tif)
    except (OSError, ValueError, IndexError, tifffile.TiffFileError) as exc:
        raise ImageFormatError(str(path), f"cannot read TIFF ({exc})") from exc

    if not (np.issubdtype(dtype, np.integer) or np.issubdtype(dtype, np.floating)):
        raise ImageFormatError(str(path), f"unsupported pixel type {dtype}")

    channel_axis = _channel_axis(shape, axes)
    if channel_axis is None:
        raise ImageFormatError(str(path), f"not a multichannel image (shape {shape})")

    return ImageInfo(
        path=path,
        shape=shape,
        axes=axes,
        dtype=str(dtype),
        channel_count=shape[channel_axis],
        pixel_size=pixel_size,
        pixel_unit=unit,
    )


def validate_image(path: Path, config: AnalysisConfig) -> ImageInfo:
    """Check that an image has the channels the configured roles need.

    Raises:
        ImageFormatError: On any structural mismatch.
    """
    info = read_image_info(path)
    needed = max(config.soma_channel, config.neurite_channel)
    if info.channel_count < needed:
        raise ImageFormatError(
            str(path),
            f"{info.channel_count} channel(s), but channel {needed} is configured",
        )
    return info


def load_image(path: Path, config: AnalysisConfig) -> RasterStack:
    """Load the soma and neurite channels of one image.

    The file is opened for the duration of the read only.

    Args:
        path: Path to a multichannel TIFF.
        config: Supplies the 1-based soma and neurite channel indices.

    Returns:
        RasterStack with "soma" and "neurite" rasters.

    Raises:
        ImageFormatError: If the image structure does not match the config.
    """
    path = Path(path)
    info = validate_image(path, config)
    try:
        with tifffile.TiffFile(str(path)) as tif:
            data = tif.series[0].asarray()
    except (OSError, ValueError, tifffile.TiffFileError) as exc:
        raise ImageFormatError(str(path), f"cannot read pixel data ({exc})") from exc

    channel_axis = _channel_axis(info.shape, info.axes)
    assert channel_axis is not None  # validated above
    planes = np.moveaxis(data, channel_axis, 0)
    planes = planes.reshape((planes.shape[0],) + planes.shape[-2:])

    if info.pixel_unit == "pixel":
        logger.warning("No spatial calibration in %s; using 1 pixel = 1 unit", path.name)

    rasters = {}
    for role, channel in ((SOMA_ROLE, config.soma_channel), (NEURITE_ROLE, config.neurite_channel)):
        rasters[role] = CalibratedRaster(
            data=planes[channel - 1],
            pixel_size=info.pixel_size,
            pixel_unit=info.pixel_unit,
            role=role,
            channel=channel,
        )

    return RasterStack(filename=path.name, rasters=rasters, channel_count=info.channel_count)


def _channel_axis(shape: tuple[int, ...], axes: str) -> int | None:
    """Locate the channel axis of a (C, Y, X)-like series.

    Every axis other than the channel axis and the last two must be
    singleton. Returns None when the series is not a multichannel 2D image.
    """
    if len(shape) < 3:
        return None

    if "C" in axes and len(axes) == len(shape):
        channel_axis = axes.index("C")
    elif "S" in axes and len(axes) == len(shape):
        # RGB-style samples
        channel_axis = axes.index("S")
    else:
        # No usable axes metadata: first non-singleton leading axis
        leading = [i for i, s in enumerate(shape[:-2]) if s > 1]
        if len(leading) != 1:
            return None
        channel_axis = leading[0]

    if channel_axis >= len(shape) - 2 and channel_axis != len(shape) - 1:
        return None

    plane_axes = {len(shape) - 2, len(shape) - 1}
    if channel_axis == len(shape) - 1:
        # Interleaved samples (Y, X, S)
        plane_axes = {len(shape) - 3, len(shape) - 2}
    for i, s in enumerate(shape):
        if i == channel_axis or i in plane_axes:
            continue
        if s != 1:
            return None
    if shape[channel_axis] < 2:
        return None
    return channel_axis


def _extract_pixel_size(tif: tifffile.TiffFile) -> tuple[float, str]:
    """Try to extract the pixel size and its unit from TIFF metadata.

    Checks in order: OME-XML, ImageJ metadata, resolution tags. Falls back
    to ``(1.0, "pixel")``.
    """
    # 1. OME-XML
    if tif.ome_metadata:
        try:
            root = ET.fromstring(tif.ome_metadata)
            pixels = root.find(".//{*}Pixels")
            if pixels is not None:
                ps_x = pixels.get("PhysicalSizeX")
                unit = pixels.get("PhysicalSizeXUnit", "µm")
                if ps_x is not None:
                    value = float(ps_x)
                    if unit in _MICRON_UNITS:
                        return value, "µm"
                    if unit == "nm":
                        return value / 1000.0, "µm"
                    if unit in ("mm", "millimeter"):
                        return value * 1000.0, "µm"
                    return value, unit
        except (ET.ParseError, ValueError) as exc:
            logger.debug("Unreadable OME metadata: %s", exc)

    page = tif.pages[0]
    tags = page.tags
    ij = tif.imagej_metadata or {}

    # 2. ImageJ stores the unit in its metadata and the scale in XResolution
    if ij and "XResolution" in tags:
        unit = str(ij.get("unit", "")).strip()
        pixels_per_unit = _resolution_value(tags["XResolution"].value)
        if unit and unit != "pixel" and pixels_per_unit:
            size = 1.0 / pixels_per_unit
            if unit in _MICRON_UNITS:
                return size, "µm"
            return size, unit

    # 3. Plain TIFF resolution tags
    if "XResolution" in tags and "ResolutionUnit" in tags:
        pixels_per_unit = _resolution_value(tags["XResolution"].value)
        res_unit = int(tags["ResolutionUnit"].value)
        if pixels_per_unit:
            # ResolutionUnit: 1=no unit, 2=inch, 3=centimeter
            if res_unit == 3:
                return 10000.0 / pixels_per_unit, "µm"
            if res_unit == 2:
                return 25400.0 / pixels_per_unit, "µm"

    return 1.0, "pixel"


def _resolution_value(value: object) -> float | None:
    """Convert a TIFF rational (numerator, denominator) to pixels per unit."""
    try:
        if isinstance(value, tuple) and len(value) == 2:
            pixels_per_unit = value[0] / value[1]
        else:
            pixels_per_unit = float(value)  # type: ignore[arg-type]
    except (TypeError, ZeroDivisionError, ValueError):
        return None
    return pixels_per_unit if pixels_per_unit > 0 else None
