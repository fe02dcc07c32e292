"""Tests for neurodeg.core.models."""

import math

import numpy as np
import pytest

from neurodeg.core.models import (
    BinaryMask,
    CalibratedRaster,
    FeatureRecord,
    MaskKind,
    RasterStack,
    SkeletonSummary,
)


def _record(**overrides) -> FeatureRecord:
    values = dict(
        filename="img.tif",
        neurite_attachment_points=3,
        total_neurite_length=120.5,
        max_branch_length=40.0,
        mean_branch_length=20.1,
        end_points=6,
        branches=6,
        trees=2,
        nuclei_count=4,
        nuclei_total_area=400.0,
        nuclei_average_area=100.0,
        total_neuron_area=900.0,
        fragmented_neurite_area=0.5,
        total_neurite_area=60.0,
    )
    values.update(overrides)
    return FeatureRecord(**values)


class TestCalibratedRaster:
    def test_pixel_area(self):
        r = CalibratedRaster(np.zeros((4, 4)), pixel_size=0.5, pixel_unit="µm")
        assert r.pixel_area == pytest.approx(0.25)
        assert r.shape == (4, 4)

    def test_rejects_3d(self):
        with pytest.raises(ValueError, match="2D"):
            CalibratedRaster(np.zeros((2, 4, 4)))

    def test_rejects_non_positive_pixel_size(self):
        with pytest.raises(ValueError, match="pixel_size"):
            CalibratedRaster(np.zeros((4, 4)), pixel_size=0.0)


class TestRasterStack:
    def test_lookup_by_role(self):
        soma = CalibratedRaster(np.zeros((4, 4)), role="soma", channel=1)
        stack = RasterStack(filename="a.tif", rasters={"soma": soma}, channel_count=2)
        assert stack.raster("soma") is soma

    def test_unknown_role(self):
        stack = RasterStack(filename="a.tif", rasters={}, channel_count=2)
        with pytest.raises(KeyError, match="neurite"):
            stack.raster("neurite")


class TestBinaryMask:
    def test_area_uses_calibration(self, square_mask):
        assert square_mask.pixel_count() == 16
        assert square_mask.area() == pytest.approx(4.0)

    def test_requires_bool(self):
        with pytest.raises(ValueError, match="boolean"):
            BinaryMask(data=np.zeros((4, 4), dtype=np.uint8), kind=MaskKind.SOMA)

    def test_subtract(self, square_mask, bar_mask):
        result = bar_mask.subtract(square_mask, MaskKind.NEURITE_WITHOUT_SOMA)
        assert result.kind is MaskKind.NEURITE_WITHOUT_SOMA
        assert result.pixel_count() == 20 - 8
        assert not (result.data & square_mask.data).any()

    def test_union_and_intersect(self, square_mask, bar_mask):
        union = square_mask.union(bar_mask, MaskKind.NEURONAL_NETWORK)
        inter = square_mask.intersect(bar_mask, MaskKind.ATTACHMENT)
        assert union.pixel_count() == 16 + 20 - 8
        assert inter.pixel_count() == 8
        assert union.pixel_size == 0.5

    def test_operations_do_not_mutate(self, square_mask, bar_mask):
        before = square_mask.data.copy()
        square_mask.union(bar_mask, MaskKind.NEURONAL_NETWORK)
        square_mask.subtract(bar_mask, MaskKind.SOMA)
        np.testing.assert_array_equal(square_mask.data, before)

    def test_shape_mismatch(self, square_mask):
        other = BinaryMask(data=np.zeros((5, 5), dtype=bool), kind=MaskKind.NEURITE)
        with pytest.raises(ValueError, match="shapes differ"):
            square_mask.union(other, MaskKind.NEURONAL_NETWORK)

    def test_from_raster_inherits_calibration(self):
        raster = CalibratedRaster(np.zeros((3, 3)), pixel_size=0.2, pixel_unit="µm")
        mask = BinaryMask.from_raster(np.ones((3, 3)), raster, MaskKind.NEURITE)
        assert mask.data.dtype == bool
        assert mask.pixel_size == 0.2
        assert mask.pixel_unit == "µm"


class TestSkeletonSummary:
    def test_defaults_are_zero(self):
        s = SkeletonSummary()
        assert s.total_length == 0.0
        assert s.branches == 0
        assert s.trees == 0


class TestFeatureRecord:
    def test_construction(self):
        r = _record()
        assert r.nuclei_count == 4
        assert r.neurite_attachment_points == 3

    def test_attachment_may_be_missing(self):
        assert _record(neurite_attachment_points=None).neurite_attachment_points is None

    def test_fragmented_cannot_exceed_total(self):
        with pytest.raises(ValueError, match="exceeds"):
            _record(fragmented_neurite_area=61.0, total_neurite_area=60.0)

    def test_fragmented_equal_to_total(self):
        r = _record(fragmented_neurite_area=0.09, total_neurite_area=0.09)
        assert math.isclose(r.fragmented_neurite_area, r.total_neurite_area)
