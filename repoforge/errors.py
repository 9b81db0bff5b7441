"""Typed failures raised by the template pipeline."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar, Dict, Optional

ExtraInfoType = Dict[str, Optional[str]]


class FailureKind(str, Enum):
    CLONE = "clone"
    PUBLISH = "publish"
    TIMEOUT = "timeout"
    CONFIGURATION = "configuration"


class PublishFailureReason(str, Enum):
    """Why the remote host refused to create or accept the template repository."""

    CREDENTIAL = "credential"
    NAMING = "naming"
    REJECTED = "rejected"


class TemplateError(RuntimeError):
    """Base class for every failure surfaced by the template pipeline.

    Subclasses form a closed set; callers branch on the type or on ``kind``
    rather than on the message text.
    """

    kind: ClassVar[FailureKind]

    def __init__(
        self,
        message: str,
        *,
        repository: str | None = None,
        extra_info: ExtraInfoType | None = None,
    ) -> None:
        self.message = message
        self.repository = repository
        self.extra_info: ExtraInfoType = dict(extra_info or {})
        details: ExtraInfoType = {"repository": repository, **self.extra_info}
        msg = message
        if any(value is not None for value in details.values()):
            msg += " (" + ", ".join(f"{key}: {value}" for key, value in details.items() if value is not None) + ")"
        super().__init__(msg)


class ConfigurationFailure(TemplateError):
    """The request cannot be attempted, e.g. no credential was supplied."""

    kind = FailureKind.CONFIGURATION


class CloneFailure(TemplateError):
    """The source repository could not be cloned or was empty."""

    kind = FailureKind.CLONE


class PublishFailure(TemplateError):
    """Creating or pushing the template repository failed."""

    kind = FailureKind.PUBLISH

    def __init__(
        self,
        message: str,
        *,
        reason: PublishFailureReason = PublishFailureReason.REJECTED,
        attempted_name: str | None = None,
        repository: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.reason = reason
        self.attempted_name = attempted_name
        self.status_code = status_code
        super().__init__(
            message,
            repository=repository,
            extra_info={
                "reason": reason.value,
                "attempted_name": attempted_name,
                "status": str(status_code) if status_code is not None else None,
            },
        )

    @property
    def requires_reauthentication(self) -> bool:
        return self.reason is PublishFailureReason.CREDENTIAL

    @property
    def retry_is_safe(self) -> bool:
        # Template names carry a timestamp suffix, so a collision clears on retry.
        return self.reason is PublishFailureReason.NAMING


class TimeoutFailure(TemplateError):
    """The whole pipeline exceeded its time budget.

    The pipeline may still be running in the background; a partially pushed
    remote repository may or may not exist.
    """

    kind = FailureKind.TIMEOUT


__all__ = [
    "CloneFailure",
    "ConfigurationFailure",
    "FailureKind",
    "PublishFailure",
    "PublishFailureReason",
    "TemplateError",
    "TimeoutFailure",
]
