"""Handler for HypershiftDeployment CRD."""

from __future__ import annotations

import copy
from typing import Any

import kopf
from kubernetes.client.exceptions import ApiException

from .. import metrics
from ..builders.hosted_cluster import scaffold_hosted_cluster_spec
from ..constants import (
    ANNOTATION_CREATED_BY,
    API_GROUP_VERSION,
    COND_HOSTED_CLUSTER_AVAILABLE,
    FINALIZER,
    FINALIZER_REQUEUE_SECONDS,
    KIND_HYPERSHIFT_DEPLOYMENT,
    NAMESPACE_NAME_SEPARATOR,
    REASON_MISCONFIGURED,
    REQUEUE_DELAY_SECONDS,
    STATUS_SYNC_INTERVAL_SECONDS,
    WORK_API_GROUP_VERSION,
)
from ..services.feedback import aggregate_feedback, work_conditions
from ..services.manifestwork import ACTION_CREATED, ACTION_UPDATED, ManifestWorkManager, work_key
from ..services.store import ObjectStore, create_object_store
from ..tracing import add_span_attribute, trace_span
from ..utils.conditions import (
    STATUS_TRUE,
    apply_conditions,
    misconfigured_condition,
    work_configured_condition,
)
from ..utils.errors import ConflictError, OwnershipError, ResolutionError, sanitize_exception
from ..utils.events import (
    emit_configuration_failed,
    emit_waiting_for_cleanup,
    emit_work_created,
    emit_work_deleted,
    emit_work_updated,
)
from .base import BaseHandler


class HypershiftDeploymentHandler(BaseHandler):
    """Handler for HypershiftDeployment resources.

    Reconcile and delete return a requeue delay in seconds, or None when the
    resource needs no further attention until its next change or timer tick.
    """

    def __init__(self, store: ObjectStore | None = None):
        """Initialize HypershiftDeployment handler.

        Args:
            store: Object store; a Kubernetes-backed store is created on first use when omitted
        """
        super().__init__(KIND_HYPERSHIFT_DEPLOYMENT)
        self._store = store
        self._manager: ManifestWorkManager | None = None

    @property
    def store(self) -> ObjectStore:
        if self._store is None:
            self._store = create_object_store()
        return self._store

    @property
    def manager(self) -> ManifestWorkManager:
        if self._manager is None:
            self._manager = ManifestWorkManager(self.store)
        return self._manager

    def reconcile(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> float | None:
        """Reconcile a HypershiftDeployment into its ManifestWork."""
        intent = copy.deepcopy(dict(body))
        name = meta.get("name", "unknown")
        namespace = meta.get("namespace", "default")

        with trace_span(
            "reconcile_hypershift_deployment",
            attributes={"hypershiftdeployment.name": name, "hypershiftdeployment.namespace": namespace},
        ):
            # No remote object is created before the finalizer is durable
            if self.ensure_finalizer(meta, patch):
                self.log_info(meta, "Added finalizer", event="finalizer", reason="FinalizerAdded")
                return FINALIZER_REQUEUE_SECONDS

            hosted_cluster_spec, encryption_default = scaffold_hosted_cluster_spec(intent)
            if encryption_default is not None:
                patch.spec["hostedClusterSpec"] = {"secretEncryption": encryption_default}
                self.log_info(
                    meta,
                    "Defaulted secret encryption to aescbc",
                    event="defaulting",
                    reason="SecretEncryptionDefaulted",
                )

            key = work_key(intent)
            work_ref = f"{key.namespace}/{key.name}"
            try:
                with trace_span("ensure_manifestwork", attributes={"manifestwork.ref": work_ref}):
                    action, work = self.manager.ensure(intent, hosted_cluster_spec)
                    add_span_attribute("manifestwork.action", action)
            except (ResolutionError, OwnershipError) as e:
                message = str(e)
                self.log_error(meta, "Failed to configure ManifestWork", error=e, reason=REASON_MISCONFIGURED)
                emit_configuration_failed(meta, sanitize_exception(e))
                metrics.error_total.labels(kind=self.kind, error_type=type(e).__name__).inc()
                self.update_conditions(patch, meta, status, [misconfigured_condition(message)])
                return None
            except (ConflictError, ApiException) as e:
                self.log_warning(
                    meta,
                    f"Transient failure writing ManifestWork {work_ref}, requeueing",
                    reason="Requeue",
                    error=sanitize_exception(e),
                )
                metrics.error_total.labels(kind=self.kind, error_type=type(e).__name__).inc()
                return REQUEUE_DELAY_SECONDS

            if action == ACTION_CREATED:
                emit_work_created(meta, work_ref)
            elif action == ACTION_UPDATED:
                emit_work_updated(meta, work_ref)
            self.log_info(meta, f"ManifestWork {work_ref} {action}", event="manifestwork", reason=action)

            work_status = work.get("status") or {}
            desired = [work_configured_condition(action == ACTION_CREATED)]
            desired.extend(work_conditions(work_status))
            if action != ACTION_CREATED:
                desired.extend(aggregate_feedback(work_status))
            self.update_conditions(patch, meta, status, desired)

            self.update_resource_status(
                any(c.type == COND_HOSTED_CLUSTER_AVAILABLE and c.status == STATUS_TRUE for c in desired)
            )
            return None

    def delete(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        patch: kopf.Patch,
    ) -> float | None:
        """Tear down the ManifestWork and wait for the hosted workloads to disappear."""
        if FINALIZER not in (meta.get("finalizers") or []):
            return None

        intent = copy.deepcopy(dict(body))
        key = work_key(intent)
        work_ref = f"{key.namespace}/{key.name}"

        with trace_span("delete_hypershift_deployment", attributes={"manifestwork.ref": work_ref}):
            try:
                if self.manager.delete(intent):
                    emit_work_deleted(meta, work_ref)
                    self.log_info(meta, f"Deleted ManifestWork {work_ref}", event="deletion", reason="Deletion")

                remaining = self.manager.remaining_workloads(intent)
            except ApiException as e:
                self.log_warning(meta, "Transient failure during teardown, requeueing", error=sanitize_exception(e))
                metrics.error_total.labels(kind=self.kind, error_type=type(e).__name__).inc()
                return REQUEUE_DELAY_SECONDS

            if remaining:
                for ref in remaining:
                    metrics.cleanup_wait_total.labels(kind=ref.split("/", 1)[0]).inc()
                message = f"Waiting for {', '.join(remaining)} to be deleted"
                self.log_info(meta, message, event="deletion", reason="WaitingForCleanup")
                emit_waiting_for_cleanup(meta, message)
                return REQUEUE_DELAY_SECONDS

            self.remove_finalizer(meta, patch)
            self.log_info(meta, "Removed finalizer", event="deletion", reason="FinalizerRemoved")
            return None

    def sync_status_from_work(self, work: dict[str, Any]) -> bool:
        """Mirror a ManifestWork's status onto the HypershiftDeployment that created it.

        Returns:
            True if the intent's status was written
        """
        annotations = (work.get("metadata") or {}).get("annotations") or {}
        owner = annotations.get(ANNOTATION_CREATED_BY, "")
        namespace, _, name = owner.partition(NAMESPACE_NAME_SEPARATOR)
        if not namespace or not name:
            return False

        intent = self.store.get(KIND_HYPERSHIFT_DEPLOYMENT, namespace, name)
        if intent is None or (intent.get("metadata") or {}).get("deletionTimestamp"):
            return False

        work_status = work.get("status") or {}
        desired = work_conditions(work_status) + aggregate_feedback(work_status)
        current = (intent.get("status") or {}).get("conditions")
        conditions, changed = apply_conditions(current, desired, intent["metadata"].get("generation"))
        if not changed:
            metrics.condition_updates_total.labels(result="unchanged").inc()
            return False

        self.store.patch_status(KIND_HYPERSHIFT_DEPLOYMENT, namespace, name, {"conditions": conditions})
        metrics.condition_updates_total.labels(result="written").inc()
        return True


# Global handler instance
_handler = HypershiftDeploymentHandler()


def _requeue(delay: float | None) -> None:
    if delay is not None:
        raise kopf.TemporaryError("requeue", delay=delay)


@kopf.on.create(API_GROUP_VERSION, KIND_HYPERSHIFT_DEPLOYMENT)
@kopf.on.update(API_GROUP_VERSION, KIND_HYPERSHIFT_DEPLOYMENT)
@kopf.on.resume(API_GROUP_VERSION, KIND_HYPERSHIFT_DEPLOYMENT)
@kopf.timer(API_GROUP_VERSION, KIND_HYPERSHIFT_DEPLOYMENT, interval=STATUS_SYNC_INTERVAL_SECONDS)
def handle_hypershift_deployment(
    body: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle HypershiftDeployment resource reconciliation."""
    if meta.get("deletionTimestamp"):
        return
    _requeue(_handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(body, meta, status, patch)))


@kopf.on.delete(API_GROUP_VERSION, KIND_HYPERSHIFT_DEPLOYMENT)
def handle_hypershift_deployment_delete(
    body: dict[str, Any],
    meta: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle HypershiftDeployment resource deletion."""
    _requeue(_handler.delete(body, meta, patch))


@kopf.on.event(WORK_API_GROUP_VERSION, "manifestworks", annotations={ANNOTATION_CREATED_BY: kopf.PRESENT})
def handle_manifestwork_event(
    body: dict[str, Any],
    type: str | None,
    **kwargs: Any,
) -> None:
    """Mirror ManifestWork status changes onto the owning HypershiftDeployment."""
    if type == "DELETED":
        return
    _handler.sync_status_from_work(copy.deepcopy(dict(body)))
