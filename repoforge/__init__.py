"""Generate cloud IDE templates from upstream GitHub repositories."""

from .errors import (
    CloneFailure,
    ConfigurationFailure,
    FailureKind,
    PublishFailure,
    PublishFailureReason,
    TemplateError,
    TimeoutFailure,
)
from .models import (
    DetectionHints,
    DetectionResult,
    PreflightResult,
    SourceLocator,
    TemplateDescriptor,
)

__all__ = [
    "CloneFailure",
    "ConfigurationFailure",
    "DetectionHints",
    "DetectionResult",
    "FailureKind",
    "PreflightResult",
    "PublishFailure",
    "PublishFailureReason",
    "SourceLocator",
    "TemplateDescriptor",
    "TemplateError",
    "TimeoutFailure",
]
