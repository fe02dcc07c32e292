"""Data models for the neurodeg core module."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

SOMA_ROLE = "soma"
NEURITE_ROLE = "neurite"


@dataclass(frozen=True)
class CalibratedRaster:
    """A single 2D intensity channel with its spatial calibration.

    Attributes:
        data: 2D intensity array (Y, X).
        pixel_size: Physical edge length of one pixel.
        pixel_unit: Unit of ``pixel_size`` (e.g. "µm").
        role: Biological role of the channel ("soma" or "neurite").
        channel: 1-based channel index in the source image.
    """

    data: np.ndarray
    pixel_size: float = 1.0
    pixel_unit: str = "pixel"
    role: str | None = None
    channel: int | None = None

    def __post_init__(self) -> None:
        """Validate shape and calibration."""
        if self.data.ndim != 2:
            raise ValueError(f"Raster must be 2D, got shape {self.data.shape}")
        if self.pixel_size <= 0:
            raise ValueError(f"pixel_size must be > 0, got {self.pixel_size}")

    @property
    def pixel_area(self) -> float:
        """Area of one pixel in calibrated units squared."""
        return float(self.pixel_size) ** 2

    @property
    def shape(self) -> tuple[int, int]:
        return self.data.shape  # type: ignore[return-value]


@dataclass(frozen=True)
class RasterStack:
    """All role-tagged channels loaded from one source image."""

    filename: str
    rasters: dict[str, CalibratedRaster]
    channel_count: int

    def raster(self, role: str) -> CalibratedRaster:
        """Return the raster assigned to ``role``.

        Raises:
            KeyError: If no channel has that role.
        """
        if role not in self.rasters:
            raise KeyError(
                f"No channel with role {role!r}. "
                f"Available: {sorted(self.rasters)}"
            )
        return self.rasters[role]


class MaskKind(Enum):
    """Which pipeline stage produced a binary mask."""

    SOMA = "soma"
    NEURITE = "neurite"
    NEURITE_WITHOUT_SOMA = "neurite_without_soma"
    NEURONAL_NETWORK = "neuronal_network"
    FRAGMENT = "fragment"
    ATTACHMENT = "attachment"


@dataclass(frozen=True)
class BinaryMask:
    """A boolean mask carrying the calibration of the raster it came from.

    Combining operations always return a new mask; ``data`` is never
    modified in place.
    """

    data: np.ndarray
    kind: MaskKind
    pixel_size: float = 1.0
    pixel_unit: str = "pixel"

    def __post_init__(self) -> None:
        if self.data.ndim != 2:
            raise ValueError(f"Mask must be 2D, got shape {self.data.shape}")
        if self.data.dtype != bool:
            raise ValueError(f"Mask data must be boolean, got {self.data.dtype}")

    @classmethod
    def from_raster(
        cls, data: np.ndarray, raster: CalibratedRaster, kind: MaskKind,
    ) -> BinaryMask:
        """Build a mask that inherits ``raster``'s calibration."""
        return cls(
            data=np.asarray(data, dtype=bool),
            kind=kind,
            pixel_size=raster.pixel_size,
            pixel_unit=raster.pixel_unit,
        )

    @property
    def pixel_area(self) -> float:
        return float(self.pixel_size) ** 2

    def pixel_count(self) -> int:
        """Number of foreground pixels."""
        return int(np.count_nonzero(self.data))

    def area(self) -> float:
        """Foreground area in calibrated units squared."""
        return float(np.float64(self.pixel_count()) * np.float64(self.pixel_area))

    def _combine(self, data: np.ndarray, kind: MaskKind) -> BinaryMask:
        return BinaryMask(
            data=data, kind=kind,
            pixel_size=self.pixel_size, pixel_unit=self.pixel_unit,
        )

    def _check_shape(self, other: BinaryMask) -> None:
        if self.data.shape != other.data.shape:
            raise ValueError(
                f"Mask shapes differ: {self.data.shape} vs {other.data.shape}"
            )

    def subtract(self, other: BinaryMask, kind: MaskKind) -> BinaryMask:
        """Pixels set in this mask but not in ``other``."""
        self._check_shape(other)
        return self._combine(self.data & ~other.data, kind)

    def union(self, other: BinaryMask, kind: MaskKind) -> BinaryMask:
        """Pixels set in either mask."""
        self._check_shape(other)
        return self._combine(self.data | other.data, kind)

    def intersect(self, other: BinaryMask, kind: MaskKind) -> BinaryMask:
        """Pixels set in both masks."""
        self._check_shape(other)
        return self._combine(self.data & other.data, kind)


@dataclass(frozen=True)
class PipelineContext:
    """The set of masks produced for one image by the segmentation stage."""

    filename: str
    soma: BinaryMask
    neurite: BinaryMask
    neurite_without_soma: BinaryMask
    network: BinaryMask


@dataclass(frozen=True)
class SkeletonSummary:
    """Scalar statistics of a skeletonized neurite mask.

    Lengths are in calibrated units.
    """

    total_length: float = 0.0
    max_branch_length: float = 0.0
    mean_branch_length: float = 0.0
    end_points: int = 0
    branches: int = 0
    trees: int = 0


@dataclass(frozen=True)
class FeatureRecord:
    """Morphometric measurements for one source image.

    ``neurite_attachment_points`` is None when no valid maxima selection
    could be formed, which is distinct from a count of zero.
    """

    filename: str
    neurite_attachment_points: int | None
    total_neurite_length: float
    max_branch_length: float
    mean_branch_length: float
    end_points: int
    branches: int
    trees: int
    nuclei_count: int
    nuclei_total_area: float
    nuclei_average_area: float
    total_neuron_area: float
    fragmented_neurite_area: float
    total_neurite_area: float

    def __post_init__(self) -> None:
        """Enforce that fragments are a subset of the neurite area."""
        # Small slack for float summation order
        if self.fragmented_neurite_area > self.total_neurite_area * (1 + 1e-9) + 1e-12:
            raise ValueError(
                f"fragmented_neurite_area ({self.fragmented_neurite_area}) exceeds "
                f"total_neurite_area ({self.total_neurite_area}) for {self.filename}"
            )

