"""neurodeg IO — image loading, tables and report files."""

from neurodeg.io.feature_table import (
    FeatureTableWriter,
    read_feature_records,
    read_feature_table,
    records_to_frame,
)
from neurodeg.io.masks import save_audit_masks
from neurodeg.io.naming import ExperimentFiles
from neurodeg.io.report import write_report
from neurodeg.io.scanner import ImageScanner
from neurodeg.io.sequence import read_sequence_metadata
from neurodeg.io.tiff import ImageInfo, load_image, read_image_info, validate_image

__all__ = [
    "ExperimentFiles",
    "FeatureTableWriter",
    "ImageInfo",
    "ImageScanner",
    "load_image",
    "read_feature_records",
    "read_feature_table",
    "read_image_info",
    "read_sequence_metadata",
    "records_to_frame",
    "save_audit_masks",
    "validate_image",
    "write_report",
]
