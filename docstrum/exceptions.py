"""Custom exceptions for the Docstrum skew estimator."""

from typing import Optional


class DocstrumError(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Human-readable error description
        error_code: Optional error code for programmatic handling
    """

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class InvalidConfigurationError(DocstrumError):
    """Invalid tuning parameter or unusable input set.

    Attributes:
        config_key: The configuration key that caused the error (if applicable)
    """

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message, error_code="CONFIG_ERROR")
        self.config_key = config_key


class InvalidDomainError(DocstrumError):
    """Invalid scan bounds or step for a critical-point search."""

    def __init__(self, message: str):
        super().__init__(message, error_code="DOMAIN_ERROR")


class UpstreamSegmentationError(DocstrumError):
    """Component extraction failed before any analysis could run.

    Attributes:
        page_name: Name of the page being segmented when the error occurred
    """

    def __init__(self, message: str, page_name: Optional[str] = None):
        super().__init__(message, error_code="SEGMENTATION_ERROR")
        self.page_name = page_name

    def __str__(self) -> str:
        if self.page_name:
            return f"{super().__str__()} (page: {self.page_name})"
        return super().__str__()


class NumericDegeneracyError(DocstrumError):
    """Curve fit is under-determined or numerically unusable.

    Attributes:
        degree: The polynomial degree requested (if applicable)
    """

    def __init__(self, message: str, degree: Optional[int] = None):
        super().__init__(message, error_code="NUMERIC_ERROR")
        self.degree = degree


class ArtifactError(DocstrumError):
    """Error rendering or storing a diagnostic artifact.

    Attributes:
        artifact_name: The artifact that failed (if applicable)
    """

    def __init__(self, message: str, artifact_name: Optional[str] = None):
        super().__init__(message, error_code="ARTIFACT_ERROR")
        self.artifact_name = artifact_name
