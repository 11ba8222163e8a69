"""CloudFormation drift detection."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import UTC, datetime

from stackctl.aws.client import CloudFormationClient
from stackctl.errors import InvalidInputError
from stackctl.models import (
    DetectionResult,
    DetectionRun,
    DetectionStatus,
    DiffType,
    DriftStatus,
    PropertyDiff,
    ResourceDrift,
    ResourceDriftStatus,
    StackDriftResult,
)
from stackctl.paginator import collect_pages
from stackctl.stack import StackManager

logger = logging.getLogger(__name__)


def _to_resource_drift(resource: dict) -> ResourceDrift:
    property_diffs = [
        PropertyDiff(
            property_path=pd["PropertyPath"],
            expected_value=pd["ExpectedValue"],
            actual_value=pd["ActualValue"],
            diff_type=DiffType(pd["DifferenceType"]),
        )
        for pd in resource.get("PropertyDifferences", [])
    ]
    return ResourceDrift(
        logical_id=resource["LogicalResourceId"],
        physical_id=resource.get("PhysicalResourceId", ""),
        resource_type=resource["ResourceType"],
        status=ResourceDriftStatus(resource["StackResourceDriftStatus"]),
        property_diffs=property_diffs,
        timestamp=resource["Timestamp"],
    )


class DriftDetector:
    """Kicks off drift detection jobs and collects their results."""

    def __init__(
        self,
        client: CloudFormationClient,
        max_concurrent: int = 5,
        poll_interval: float = 5.0,
        max_poll_attempts: int = 60,
    ):
        self._client = client
        self._stacks = StackManager(client)
        self._max_concurrent = max_concurrent
        self._poll_interval = poll_interval
        self._max_poll_attempts = max_poll_attempts

    def detect_drift(self, stack_name: str, *resource_ids: str) -> str:
        """Start drift detection and return the detection id without waiting."""
        if not stack_name:
            raise InvalidInputError("Missing stack name")

        resp = self._client.detect_stack_drift(stack_name, list(resource_ids))
        return resp["StackDriftDetectionId"]

    def describe_resource_drifts(self, stack_name: str, *status_filter: str) -> list[ResourceDrift]:
        """Fetch the latest resource-level drift details for a stack."""
        if not stack_name:
            raise InvalidInputError("Missing stack name")

        raw = collect_pages(
            lambda token: self._client.describe_stack_resource_drifts(
                stack_name, list(status_filter), next_token=token
            ),
            "StackResourceDrifts",
        )
        return [_to_resource_drift(r) for r in raw]

    def get_drift_status(self, detection_id: str, stack_name: str = "") -> DetectionRun:
        """Check status of a drift detection operation."""
        resp = self._client.describe_stack_drift_detection_status(detection_id)

        status = DetectionStatus(resp["DetectionStatus"])
        drift_status = None
        drifted_count = None
        status_reason = None

        if status == DetectionStatus.COMPLETE:
            drift_status = DriftStatus(resp["StackDriftStatus"])
            drifted_count = resp.get("DriftedStackResourceCount", 0)
        elif status == DetectionStatus.FAILED:
            status_reason = resp.get("DetectionStatusReason")

        return DetectionRun(
            detection_id=detection_id,
            stack_id=resp["StackId"],
            stack_name=stack_name,
            status=status,
            started_at=resp["Timestamp"],
            drift_status=drift_status,
            drifted_resource_count=drifted_count,
            status_reason=status_reason,
        )

    def wait_for_detection(self, detection_id: str, stack_name: str) -> DetectionRun | None:
        """Poll a detection job until it finishes. Returns None on failure or timeout."""
        for _ in range(self._max_poll_attempts):
            run = self.get_drift_status(detection_id, stack_name)

            if run.status == DetectionStatus.COMPLETE:
                return run
            elif run.status == DetectionStatus.FAILED:
                logger.warning(
                    "Drift detection failed for %s: %s",
                    stack_name,
                    run.status_reason,
                )
                return None

            if self._poll_interval > 0:
                time.sleep(self._poll_interval)

        logger.warning("Drift detection timed out for %s", stack_name)
        return None

    def detect(self, stack_names: list[str]) -> DetectionResult:
        """Run drift detection on several stacks concurrently."""
        results: list[StackDriftResult] = []
        failed_stacks: list[str] = []

        with ThreadPoolExecutor(max_workers=self._max_concurrent) as executor:
            futures = {executor.submit(self._detect_stack, name): name for name in stack_names}
            for future in as_completed(futures):
                stack_name = futures[future]
                try:
                    result = future.result()
                    if result is not None:
                        results.append(result)
                    else:
                        failed_stacks.append(stack_name)
                except Exception:
                    logger.exception("Failed to detect drift for %s", stack_name)
                    failed_stacks.append(stack_name)

        return DetectionResult(results=results, failed_stacks=failed_stacks)

    def _detect_stack(self, stack_name: str) -> StackDriftResult | None:
        if not self._stacks.exists(stack_name):
            logger.warning("Stack %s does not exist", stack_name)
            return None

        detection_id = self.detect_drift(stack_name)
        run = self.wait_for_detection(detection_id, stack_name)
        if run is None:
            return None

        return StackDriftResult(
            stack_id=run.stack_id,
            stack_name=stack_name,
            drift_status=run.drift_status,
            resource_drifts=self.describe_resource_drifts(stack_name),
            detection_id=detection_id,
            timestamp=datetime.now(UTC),
            drifted_resource_count=run.drifted_resource_count or 0,
        )
