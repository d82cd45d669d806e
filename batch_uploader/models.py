"""
Models for batch_uploader module.

Immutable dataclasses following Single Responsibility Principle.
"""
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .orchestrator.retry import RetryCoordinator


class ErrorKind(Enum):
    """Closed taxonomy of upload failures."""
    SIZE_ERROR = "SizeError"    # file exceeds an external size limit
    VALID_ERROR = "ValidError"  # file fails external content/type validation
    OTHER_ERROR = "OtherError"  # anything else, assumed transient

    @property
    def retryable(self) -> bool:
        return self is ErrorKind.OTHER_ERROR


class UploadStatus(Enum):
    """Upload operation status."""
    SUCCESS = "success"
    FAILED = "failed"


class Severity(Enum):
    """Notification severity."""
    ERROR = "error"


@dataclass(frozen=True, eq=False)
class UploadItem:
    """
    One file selected for upload.

    Compared by identity: two items pointing at the same path are still
    distinct members of a batch.
    """
    path: Path
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "path", Path(self.path))
        if not self.name:
            object.__setattr__(self, "name", self.path.name)

    @classmethod
    def from_path(cls, path, name: Optional[str] = None) -> "UploadItem":
        return cls(path=Path(path), name=name or "")

    def __repr__(self) -> str:
        return f"UploadItem({self.name!r})"


@dataclass(frozen=True)
class UploadOutcome:
    """Immutable result of uploading one item."""
    item: UploadItem
    status: UploadStatus = UploadStatus.SUCCESS
    kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == UploadStatus.SUCCESS

    @property
    def name(self) -> str:
        return self.item.name

    @classmethod
    def ok(cls, item: UploadItem) -> "UploadOutcome":
        return cls(item=item, status=UploadStatus.SUCCESS)

    @classmethod
    def fail(cls, item: UploadItem, kind: ErrorKind, message: str) -> "UploadOutcome":
        return cls(item=item, status=UploadStatus.FAILED, kind=kind, message=message)


@dataclass(frozen=True)
class BatchResult:
    """Ordered outcomes of one orchestration cycle plus their partitions by kind."""
    outcomes: Tuple[UploadOutcome, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "outcomes", tuple(self.outcomes))

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def successes(self) -> Tuple[UploadOutcome, ...]:
        return tuple(o for o in self.outcomes if o.success)

    @property
    def failures(self) -> Tuple[UploadOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.success)

    def failures_of(self, kind: ErrorKind) -> Tuple[UploadOutcome, ...]:
        return tuple(o for o in self.failures if o.kind is kind)

    @property
    def size_failures(self) -> Tuple[UploadOutcome, ...]:
        return self.failures_of(ErrorKind.SIZE_ERROR)

    @property
    def valid_failures(self) -> Tuple[UploadOutcome, ...]:
        return self.failures_of(ErrorKind.VALID_ERROR)

    @property
    def other_failures(self) -> Tuple[UploadOutcome, ...]:
        return self.failures_of(ErrorKind.OTHER_ERROR)

    @property
    def retry_set(self) -> Tuple[UploadItem, ...]:
        """Items worth resubmitting: only transient failures qualify."""
        return tuple(o.item for o in self.other_failures)

    @property
    def all_success(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class NotificationRequest:
    """Payload handed to the notification capability."""
    message: str
    affected: Tuple[str, ...] = ()
    is_aggregate: bool = False
    retry_action: Optional["RetryCoordinator"] = None
    kind: Optional[ErrorKind] = None
    severity: Severity = Severity.ERROR

    def __post_init__(self):
        object.__setattr__(self, "affected", tuple(self.affected))

    @property
    def retryable(self) -> bool:
        return self.retry_action is not None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "message": self.message,
            "affectedNames": list(self.affected),
            "isAggregate": self.is_aggregate,
            "retryAction": self.retry_action,
        }


@dataclass(frozen=True)
class UploadConfig:
    """Immutable configuration for batch upload operations."""
    endpoint: Optional[str] = None
    field_name: str = "file"
    timeout: float = 60.0
    max_parallel: int = 1  # 1 = strictly sequential
    max_transport_retries: int = 3
    messages: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.max_parallel < 1:
            raise ValueError(f"max_parallel must be >= 1, got {self.max_parallel}")
        if self.max_transport_retries < 1:
            raise ValueError(
                f"max_transport_retries must be >= 1, got {self.max_transport_retries}"
            )

    @classmethod
    def from_env(cls, **overrides) -> "UploadConfig":
        """Build config from BATCH_UPLOAD_* environment variables."""
        values: Dict[str, Any] = {}
        endpoint = os.getenv("BATCH_UPLOAD_ENDPOINT")
        if endpoint:
            values["endpoint"] = endpoint
        timeout = os.getenv("BATCH_UPLOAD_TIMEOUT")
        if timeout:
            values["timeout"] = float(timeout)
        max_parallel = os.getenv("BATCH_UPLOAD_MAX_PARALLEL")
        if max_parallel:
            values["max_parallel"] = int(max_parallel)
        retries = os.getenv("BATCH_UPLOAD_MAX_TRANSPORT_RETRIES")
        if retries:
            values["max_transport_retries"] = int(retries)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
