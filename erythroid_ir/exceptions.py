"""Exception types raised by the retention analysis pipeline."""


class RetentionAnalysisError(Exception):
    """Base class for errors raised by erythroid_ir."""

    pass


class DatasetError(RetentionAnalysisError, ValueError):
    """Raised when a retention table violates the dataset schema or keys."""

    pass


class MergeError(RetentionAnalysisError):
    """Raised when coverage statistics cannot be matched to every record."""

    pass


class LabelMismatchError(RetentionAnalysisError):
    """Raised when observed cluster sizes disagree with the declared sizes."""

    pass
