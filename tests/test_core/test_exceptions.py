"""Tests for neurodeg.core.exceptions."""

import pytest

from neurodeg.core.exceptions import (
    AnalysisError,
    CohortJoinError,
    FatalBatchError,
    ImageFormatError,
    MetadataHeaderError,
)


class TestExceptionHierarchy:
    def test_fatal_errors(self):
        for exc_cls in (ImageFormatError, MetadataHeaderError):
            assert issubclass(exc_cls, FatalBatchError)
            assert issubclass(exc_cls, AnalysisError)

    def test_join_error_is_not_fatal_batch_error(self):
        assert issubclass(CohortJoinError, AnalysisError)
        assert not issubclass(CohortJoinError, FatalBatchError)

    def test_catch_all_with_base(self):
        with pytest.raises(AnalysisError):
            raise ImageFormatError("a.tif", "2D image")


class TestImageFormatError:
    def test_path_and_reason(self):
        exc = ImageFormatError("/data/a.tif", "not a multichannel image")
        assert "/data/a.tif" in str(exc)
        assert "not a multichannel image" in str(exc)
        assert exc.path == "/data/a.tif"
        assert exc.reason == "not a multichannel image"

    def test_reason_only(self):
        exc = ImageFormatError(reason="unsupported pixel type bool")
        assert "unsupported pixel type bool" in str(exc)
        assert exc.path is None

    def test_default_message(self):
        assert "Invalid image" in str(ImageFormatError())


class TestMetadataHeaderError:
    def test_token_in_message(self):
        exc = MetadataHeaderError("seq.txt", "Condition")
        assert "Condition" in str(exc)
        assert "seq.txt" in str(exc)
        assert exc.token == "Condition"

    def test_default_message(self):
        assert "header" in str(MetadataHeaderError()).lower()


class TestCohortJoinError:
    def test_lists_unmatched_names(self):
        exc = CohortJoinError(["img_04"], ["img_09"], [])
        assert exc.unmatched_features == ["img_04"]
        assert exc.unmatched_sequence == ["img_09"]
        assert exc.duplicates == []
        assert "img_04" in str(exc)
        assert "img_09" in str(exc)

    def test_duplicates(self):
        exc = CohortJoinError(duplicates=["img_01"])
        assert "duplicate" in str(exc)
        assert "img_01" in str(exc)
