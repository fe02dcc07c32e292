"""Exception classes for neurodeg."""


class AnalysisError(Exception):
    """Base exception for all analysis errors."""


class FatalBatchError(AnalysisError):
    """Raised when the batch input is structurally invalid.

    A fatal batch error aborts the whole run before any report is written.
    """


class ImageFormatError(FatalBatchError):
    """Raised when a source image has the wrong type or channel layout."""

    def __init__(self, path: str | None = None, reason: str | None = None) -> None:
        if path and reason:
            msg = f"Invalid image {path}: {reason}"
        elif path:
            msg = f"Invalid image: {path}"
        elif reason:
            msg = f"Invalid image: {reason}"
        else:
            msg = "Invalid image"
        super().__init__(msg)
        self.path = path
        self.reason = reason


class MetadataHeaderError(FatalBatchError):
    """Raised when the sequence metadata table has no recognizable header."""

    def __init__(self, path: str | None = None, token: str | None = None) -> None:
        if path and token:
            msg = f"Header token {token!r} not found in {path}"
        elif path:
            msg = f"No header found in {path}"
        else:
            msg = "Sequence metadata header not found"
        super().__init__(msg)
        self.path = path
        self.token = token


class CohortJoinError(AnalysisError):
    """Raised when feature rows and sequence rows cannot be matched one-to-one."""

    def __init__(
        self,
        unmatched_features: list[str] | None = None,
        unmatched_sequence: list[str] | None = None,
        duplicates: list[str] | None = None,
    ) -> None:
        self.unmatched_features = list(unmatched_features or [])
        self.unmatched_sequence = list(unmatched_sequence or [])
        self.duplicates = list(duplicates or [])

        parts: list[str] = []
        if self.duplicates:
            parts.append(f"duplicate filenames: {', '.join(self.duplicates)}")
        if self.unmatched_features:
            parts.append(
                f"images without sequence entry: {', '.join(self.unmatched_features)}"
            )
        if self.unmatched_sequence:
            parts.append(
                f"sequence entries without image data: {', '.join(self.unmatched_sequence)}"
            )
        msg = "Cannot join image data to sequence metadata"
        if parts:
            msg += " (" + "; ".join(parts) + ")"
        super().__init__(msg)
