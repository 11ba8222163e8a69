"""Core data models for CloudFormation stacks, events and drift."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class StackStatus(StrEnum):
    """CloudFormation stack status."""

    CREATE_IN_PROGRESS = "CREATE_IN_PROGRESS"
    CREATE_FAILED = "CREATE_FAILED"
    CREATE_COMPLETE = "CREATE_COMPLETE"
    ROLLBACK_IN_PROGRESS = "ROLLBACK_IN_PROGRESS"
    ROLLBACK_FAILED = "ROLLBACK_FAILED"
    ROLLBACK_COMPLETE = "ROLLBACK_COMPLETE"
    DELETE_IN_PROGRESS = "DELETE_IN_PROGRESS"
    DELETE_FAILED = "DELETE_FAILED"
    DELETE_COMPLETE = "DELETE_COMPLETE"
    UPDATE_IN_PROGRESS = "UPDATE_IN_PROGRESS"
    UPDATE_COMPLETE_CLEANUP_IN_PROGRESS = "UPDATE_COMPLETE_CLEANUP_IN_PROGRESS"
    UPDATE_COMPLETE = "UPDATE_COMPLETE"
    UPDATE_FAILED = "UPDATE_FAILED"
    UPDATE_ROLLBACK_IN_PROGRESS = "UPDATE_ROLLBACK_IN_PROGRESS"
    UPDATE_ROLLBACK_FAILED = "UPDATE_ROLLBACK_FAILED"
    UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS = "UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS"
    UPDATE_ROLLBACK_COMPLETE = "UPDATE_ROLLBACK_COMPLETE"
    REVIEW_IN_PROGRESS = "REVIEW_IN_PROGRESS"
    IMPORT_IN_PROGRESS = "IMPORT_IN_PROGRESS"
    IMPORT_COMPLETE = "IMPORT_COMPLETE"
    IMPORT_ROLLBACK_IN_PROGRESS = "IMPORT_ROLLBACK_IN_PROGRESS"
    IMPORT_ROLLBACK_FAILED = "IMPORT_ROLLBACK_FAILED"
    IMPORT_ROLLBACK_COMPLETE = "IMPORT_ROLLBACK_COMPLETE"


class WaiterType(StrEnum):
    """Long-running operation a waiter blocks on."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class DetectionStatus(StrEnum):
    """Status of a drift detection operation."""

    IN_PROGRESS = "DETECTION_IN_PROGRESS"
    COMPLETE = "DETECTION_COMPLETE"
    FAILED = "DETECTION_FAILED"


class DriftStatus(StrEnum):
    """Overall stack drift status."""

    DRIFTED = "DRIFTED"
    IN_SYNC = "IN_SYNC"
    NOT_CHECKED = "NOT_CHECKED"
    UNKNOWN = "UNKNOWN"


class ResourceDriftStatus(StrEnum):
    """Individual resource drift status."""

    IN_SYNC = "IN_SYNC"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    NOT_CHECKED = "NOT_CHECKED"
    UNKNOWN = "UNKNOWN"
    UNSUPPORTED = "UNSUPPORTED"


class DiffType(StrEnum):
    """Property difference type."""

    ADD = "ADD"
    REMOVE = "REMOVE"
    NOT_EQUAL = "NOT_EQUAL"


@dataclass(frozen=True)
class Stack:
    """A single stack as returned by DescribeStacks."""

    stack_id: str
    stack_name: str
    status: StackStatus
    creation_time: datetime
    status_reason: str | None = None
    last_updated_time: datetime | None = None
    description: str | None = None
    parameters: dict[str, str] = field(default_factory=dict)
    tags: dict[str, str] = field(default_factory=dict)
    outputs: dict[str, str] = field(default_factory=dict)
    capabilities: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class StackSummary:
    """One ListStacks entry."""

    stack_id: str
    stack_name: str
    status: StackStatus
    creation_time: datetime
    deletion_time: datetime | None = None
    template_description: str | None = None


@dataclass(frozen=True)
class StackResource:
    """A resource provisioned by a stack."""

    logical_id: str
    physical_id: str | None
    resource_type: str
    status: str
    timestamp: datetime
    status_reason: str | None = None


@dataclass(frozen=True)
class StackEvent:
    """An entry of a stack's event log. Ordered by ``timestamp``."""

    event_id: str
    stack_name: str
    timestamp: datetime
    logical_id: str
    resource_type: str
    resource_status: str
    status_reason: str | None = None


@dataclass(frozen=True)
class TemplateValidation:
    """Result of ValidateTemplate."""

    capabilities: list[str]
    parameters: list[str]
    description: str | None = None
    capabilities_reason: str | None = None


@dataclass(frozen=True)
class PropertyDiff:
    """A single property difference between expected and actual configuration."""

    property_path: str
    expected_value: str
    actual_value: str
    diff_type: DiffType


@dataclass(frozen=True)
class ResourceDrift:
    """Drift information for a single CloudFormation resource."""

    logical_id: str
    physical_id: str
    resource_type: str
    status: ResourceDriftStatus
    property_diffs: list[PropertyDiff]
    timestamp: datetime


@dataclass(frozen=True)
class StackDriftResult:
    """Complete drift detection results for a single stack."""

    stack_id: str
    stack_name: str
    drift_status: DriftStatus
    resource_drifts: list[ResourceDrift]
    detection_id: str
    timestamp: datetime
    drifted_resource_count: int


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of a multi-stack drift detection run."""

    results: list[StackDriftResult]
    failed_stacks: list[str]


@dataclass(frozen=True)
class DetectionRun:
    """Tracks an in-progress drift detection operation for polling."""

    detection_id: str
    stack_id: str
    stack_name: str
    status: DetectionStatus
    started_at: datetime
    drift_status: DriftStatus | None = None
    drifted_resource_count: int | None = None
    status_reason: str | None = None
