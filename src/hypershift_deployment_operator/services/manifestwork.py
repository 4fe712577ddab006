"""ManifestWork management for HypershiftDeployments."""

from __future__ import annotations

import copy
import logging
from typing import Any, NamedTuple

from .. import metrics
from ..builders.manifests import get_target_namespace
from ..builders.payload import build_payload
from ..constants import (
    ANNOTATION_CREATED_BY,
    HYPERSHIFT_API_GROUP,
    KIND_HOSTED_CLUSTER,
    KIND_MANIFEST_WORK,
    KIND_NODE_POOL,
    NAMESPACE_NAME_SEPARATOR,
    WORK_API_GROUP_VERSION,
)
from ..utils.errors import AlreadyExistsError, ConflictError, OwnershipError
from .store import ObjectStore

logger = logging.getLogger(__name__)

ACTION_CREATED = "created"
ACTION_UPDATED = "updated"
ACTION_UNCHANGED = "unchanged"

# Feedback paths reported back by the work agent, keyed by feedback field name
HOSTED_CLUSTER_FEEDBACK_PATHS = {
    "Status": '.status.conditions[?(@.type=="Available")].status',
    "Reason": '.status.conditions[?(@.type=="Available")].reason',
    "Message": '.status.conditions[?(@.type=="Available")].message',
    "Progress": ".status.version.history[0].state",
}

NODE_POOL_FEEDBACK_PATHS = {
    "Status": '.status.conditions[?(@.type=="Ready")].status',
    "Reason": '.status.conditions[?(@.type=="Ready")].reason',
    "Message": '.status.conditions[?(@.type=="Ready")].message',
}


class WorkKey(NamedTuple):
    namespace: str
    name: str


def work_key(intent: dict[str, Any]) -> WorkKey:
    """Location of the ManifestWork.

    In a hosting cluster namespace, which is shared by every intent placed on
    that cluster, the work is named <intent namespace>-<intent name>. Without
    a hosting cluster it is named after the intent in the target namespace.
    """
    metadata = intent["metadata"]
    hosting_cluster = (intent.get("spec") or {}).get("hostingCluster")
    if hosting_cluster:
        return WorkKey(hosting_cluster, f"{metadata.get('namespace', 'default')}-{metadata['name']}")
    return WorkKey(get_target_namespace(intent), metadata["name"])


def created_by(intent: dict[str, Any]) -> str:
    metadata = intent["metadata"]
    return f"{metadata.get('namespace', 'default')}{NAMESPACE_NAME_SEPARATOR}{metadata['name']}"


def work_owner(work: dict[str, Any]) -> str | None:
    """The namespace/name of the HypershiftDeployment recorded on a ManifestWork, if any."""
    annotations = (work.get("metadata") or {}).get("annotations") or {}
    return annotations.get(ANNOTATION_CREATED_BY) or None


def check_owner(work: dict[str, Any], intent: dict[str, Any]) -> None:
    """Raise OwnershipError when the ManifestWork was created by another HypershiftDeployment."""
    owner = work_owner(work)
    if owner is not None and owner != created_by(intent):
        metadata = work.get("metadata") or {}
        raise OwnershipError(
            f"ManifestWork {metadata.get('namespace')}/{metadata.get('name')} is owned by"
            f" HypershiftDeployment {owner}",
            owner=owner,
        )


def _manifest_config(resource: str, name: str, namespace: str, paths: dict[str, str]) -> dict[str, Any]:
    return {
        "resourceIdentifier": {
            "group": HYPERSHIFT_API_GROUP,
            "resource": resource,
            "name": name,
            "namespace": namespace,
        },
        "feedbackRules": [
            {
                "type": "JSONPaths",
                "jsonPaths": [{"name": field, "path": path} for field, path in paths.items()],
            }
        ],
    }


def build_manifest_configs(intent: dict[str, Any]) -> list[dict[str, Any]]:
    """Status feedback rules for the HostedCluster and every NodePool."""
    namespace = get_target_namespace(intent)
    configs = [
        _manifest_config("hostedclusters", intent["metadata"]["name"], namespace, HOSTED_CLUSTER_FEEDBACK_PATHS)
    ]
    for node_pool in (intent.get("spec") or {}).get("nodePools") or []:
        configs.append(_manifest_config("nodepools", node_pool["name"], namespace, NODE_POOL_FEEDBACK_PATHS))
    return configs


class ManifestWorkManager:
    """Creates, updates and deletes the ManifestWork of a HypershiftDeployment."""

    def __init__(self, store: ObjectStore) -> None:
        self.store = store

    def scaffold(self, intent: dict[str, Any]) -> dict[str, Any]:
        """Empty ManifestWork carrying the identity and created-by annotation."""
        key = work_key(intent)
        return {
            "apiVersion": WORK_API_GROUP_VERSION,
            "kind": KIND_MANIFEST_WORK,
            "metadata": {
                "name": key.name,
                "namespace": key.namespace,
                "annotations": {ANNOTATION_CREATED_BY: created_by(intent)},
            },
            "spec": {},
        }

    def get(self, intent: dict[str, Any]) -> dict[str, Any] | None:
        key = work_key(intent)
        return self.store.get(KIND_MANIFEST_WORK, key.namespace, key.name)

    def build_spec(
        self,
        intent: dict[str, Any],
        previous_manifests: list[dict[str, Any]],
        hosted_cluster_spec: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Build the workload and feedback rules of the ManifestWork spec."""
        manifests = build_payload(intent, self.store, previous_manifests, hosted_cluster_spec)
        return {
            "workload": {"manifests": manifests},
            "manifestConfigs": build_manifest_configs(intent),
        }

    def ensure(
        self, intent: dict[str, Any], hosted_cluster_spec: dict[str, Any] | None = None
    ) -> tuple[str, dict[str, Any]]:
        """Create or update the ManifestWork so it carries the current payload.

        The payload is built before any write, so a resolution failure leaves
        the existing work untouched.

        Args:
            intent: HypershiftDeployment object
            hosted_cluster_spec: Defaulted hostedClusterSpec (scaffolded from the intent when None)

        Returns:
            Tuple of (action, ManifestWork) where action is created, updated or unchanged

        Raises:
            ResolutionError: If the payload cannot be built
            OwnershipError: If the existing work belongs to another HypershiftDeployment
            ConflictError: If the work changed concurrently
        """
        key = work_key(intent)
        existing = self.get(intent)

        if existing is None:
            work = self.scaffold(intent)
            work["spec"] = self.build_spec(intent, [], hosted_cluster_spec)
            try:
                created = self.store.create(work)
                metrics.manifestwork_operations_total.labels(operation="create", result="success").inc()
                logger.info(f"Created ManifestWork {key.namespace}/{key.name}")
                return ACTION_CREATED, created
            except AlreadyExistsError:
                # Lost a create race, fall through to update
                existing = self.get(intent)
                if existing is None:
                    metrics.manifestwork_operations_total.labels(operation="create", result="conflict").inc()
                    raise ConflictError(
                        f"ManifestWork {key.namespace}/{key.name} already exists but could not be read"
                    ) from None

        try:
            check_owner(existing, intent)
        except OwnershipError:
            metrics.manifestwork_operations_total.labels(operation="update", result="foreign").inc()
            raise

        existing_spec = existing.get("spec") or {}
        previous_manifests = (existing_spec.get("workload") or {}).get("manifests") or []
        desired_spec = self.build_spec(intent, previous_manifests, hosted_cluster_spec)

        if (
            existing_spec.get("workload") == desired_spec["workload"]
            and existing_spec.get("manifestConfigs") == desired_spec["manifestConfigs"]
        ):
            metrics.manifestwork_operations_total.labels(operation="update", result="unchanged").inc()
            return ACTION_UNCHANGED, existing

        work = copy.deepcopy(existing)
        work.setdefault("spec", {}).update(desired_spec)
        annotations = work.setdefault("metadata", {}).get("annotations") or {}
        annotations[ANNOTATION_CREATED_BY] = created_by(intent)
        work["metadata"]["annotations"] = annotations
        try:
            updated = self.store.update(work)
        except ConflictError:
            metrics.manifestwork_operations_total.labels(operation="update", result="conflict").inc()
            raise
        metrics.manifestwork_operations_total.labels(operation="update", result="success").inc()
        logger.info(f"Updated ManifestWork {key.namespace}/{key.name}")
        return ACTION_UPDATED, updated

    def delete(self, intent: dict[str, Any]) -> bool:
        """Delete the ManifestWork.

        Returns False when it was already gone. A work created by another
        HypershiftDeployment is left in place and reported as not deleted.
        """
        key = work_key(intent)
        existing = self.get(intent)
        if existing is None:
            metrics.manifestwork_operations_total.labels(operation="delete", result="not_found").inc()
            return False
        try:
            check_owner(existing, intent)
        except OwnershipError as e:
            metrics.manifestwork_operations_total.labels(operation="delete", result="foreign").inc()
            logger.warning(f"Not deleting: {e}")
            return False

        deleted = self.store.delete(KIND_MANIFEST_WORK, key.namespace, key.name)
        result = "success" if deleted else "not_found"
        metrics.manifestwork_operations_total.labels(operation="delete", result=result).inc()
        return deleted

    def remaining_workloads(self, intent: dict[str, Any]) -> list[str]:
        """HostedCluster and NodePools of the intent that still exist, as kind/namespace/name refs."""
        namespace = get_target_namespace(intent)
        remaining = []
        for node_pool in (intent.get("spec") or {}).get("nodePools") or []:
            if self.store.get(KIND_NODE_POOL, namespace, node_pool["name"]) is not None:
                remaining.append(f"{KIND_NODE_POOL}/{namespace}/{node_pool['name']}")
        name = intent["metadata"]["name"]
        if self.store.get(KIND_HOSTED_CLUSTER, namespace, name) is not None:
            remaining.append(f"{KIND_HOSTED_CLUSTER}/{namespace}/{name}")
        return remaining
