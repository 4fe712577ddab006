"""Object store interface and its Kubernetes implementation."""

from __future__ import annotations

import time
from typing import Any, Callable, NamedTuple, Protocol

from kubernetes import client, config

from .. import metrics
from ..constants import (
    API_GROUP,
    API_VERSION,
    FIELD_MANAGER,
    HYPERSHIFT_API_GROUP,
    HYPERSHIFT_API_VERSION,
    KIND_CONFIG_MAP,
    KIND_HOSTED_CLUSTER,
    KIND_HYPERSHIFT_DEPLOYMENT,
    KIND_MANIFEST_WORK,
    KIND_NODE_POOL,
    KIND_SECRET,
    WORK_API_GROUP,
    WORK_API_VERSION,
)
from ..utils.errors import AlreadyExistsError, ConflictError
from ..utils.rate_limit import rate_limit_k8s, retry_on_rate_limit


class ObjectStore(Protocol):
    """Protocol defining the remote object operations the operator consumes."""

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any] | None:
        """Get an object, or None when it does not exist."""
        ...

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Create an object.

        Raises:
            AlreadyExistsError: If an object with the same identity exists
        """
        ...

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace an object.

        Raises:
            ConflictError: If the object was modified concurrently
        """
        ...

    def delete(self, kind: str, namespace: str, name: str) -> bool:
        """Delete an object. Returns False when it did not exist."""
        ...

    def patch_status(self, kind: str, namespace: str, name: str, status: dict[str, Any]) -> None:
        """Merge-patch the status subresource of an object."""
        ...


class CustomResource(NamedTuple):
    group: str
    version: str
    plural: str


CUSTOM_RESOURCES: dict[str, CustomResource] = {
    KIND_HYPERSHIFT_DEPLOYMENT: CustomResource(API_GROUP, API_VERSION, "hypershiftdeployments"),
    KIND_MANIFEST_WORK: CustomResource(WORK_API_GROUP, WORK_API_VERSION, "manifestworks"),
    KIND_HOSTED_CLUSTER: CustomResource(HYPERSHIFT_API_GROUP, HYPERSHIFT_API_VERSION, "hostedclusters"),
    KIND_NODE_POOL: CustomResource(HYPERSHIFT_API_GROUP, HYPERSHIFT_API_VERSION, "nodepools"),
}

CORE_RESOURCES: dict[str, str] = {
    KIND_SECRET: "secret",
    KIND_CONFIG_MAP: "config_map",
}


def _identity(obj: dict[str, Any]) -> tuple[str, str, str]:
    metadata = obj.get("metadata") or {}
    return obj.get("kind", ""), metadata.get("namespace", ""), metadata.get("name", "")


class KubernetesObjectStore:
    """ObjectStore backed by the Kubernetes API.

    Secrets and ConfigMaps go through CoreV1Api, every other supported kind
    through CustomObjectsApi. Objects are exchanged as plain dicts in their
    wire (camelCase) form.
    """

    def __init__(self, api_client: client.ApiClient | None = None):
        self.api_client = api_client or client.ApiClient()
        self.core_api = client.CoreV1Api(self.api_client)
        self.custom_api = client.CustomObjectsApi(self.api_client)

    def _call(self, operation: str, func: Callable[..., Any], **kwargs: Any) -> Any:
        """Invoke an API method with rate limiting, rate-limit retries and metrics."""
        start_time = time.time()
        try:
            result = retry_on_rate_limit(rate_limit_k8s(func))(**kwargs)
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="success").inc()
            return result
        except client.exceptions.ApiException as e:
            result_label = "not_found" if e.status == 404 else "error"
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result=result_label).inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation=operation).observe(duration)

    def _to_dict(self, obj: Any) -> dict[str, Any]:
        if isinstance(obj, dict):
            return obj
        return self.api_client.sanitize_for_serialization(obj)

    def _resource(self, kind: str) -> CustomResource:
        try:
            return CUSTOM_RESOURCES[kind]
        except KeyError:
            raise ValueError(f"Unsupported kind: {kind}") from None

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any] | None:
        """Get an object, or None when it does not exist."""
        try:
            if kind in CORE_RESOURCES:
                method = getattr(self.core_api, f"read_namespaced_{CORE_RESOURCES[kind]}")
                obj = self._call(f"get_{kind.lower()}", method, name=name, namespace=namespace)
                return self._to_dict(obj)

            res = self._resource(kind)
            return self._call(
                f"get_{kind.lower()}",
                self.custom_api.get_namespaced_custom_object,
                group=res.group,
                version=res.version,
                namespace=namespace,
                plural=res.plural,
                name=name,
            )
        except client.exceptions.ApiException as e:
            if e.status == 404:
                return None
            raise

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Create an object."""
        kind, namespace, name = _identity(obj)
        try:
            if kind in CORE_RESOURCES:
                method = getattr(self.core_api, f"create_namespaced_{CORE_RESOURCES[kind]}")
                created = self._call(
                    f"create_{kind.lower()}", method, namespace=namespace, body=obj, field_manager=FIELD_MANAGER
                )
                return self._to_dict(created)

            res = self._resource(kind)
            return self._call(
                f"create_{kind.lower()}",
                self.custom_api.create_namespaced_custom_object,
                group=res.group,
                version=res.version,
                namespace=namespace,
                plural=res.plural,
                body=obj,
                field_manager=FIELD_MANAGER,
            )
        except client.exceptions.ApiException as e:
            if e.status == 409:
                raise AlreadyExistsError(f"{kind} {namespace}/{name} already exists") from e
            raise

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace an object."""
        kind, namespace, name = _identity(obj)
        try:
            if kind in CORE_RESOURCES:
                method = getattr(self.core_api, f"replace_namespaced_{CORE_RESOURCES[kind]}")
                updated = self._call(
                    f"update_{kind.lower()}",
                    method,
                    name=name,
                    namespace=namespace,
                    body=obj,
                    field_manager=FIELD_MANAGER,
                )
                return self._to_dict(updated)

            res = self._resource(kind)
            return self._call(
                f"update_{kind.lower()}",
                self.custom_api.replace_namespaced_custom_object,
                group=res.group,
                version=res.version,
                namespace=namespace,
                plural=res.plural,
                name=name,
                body=obj,
                field_manager=FIELD_MANAGER,
            )
        except client.exceptions.ApiException as e:
            if e.status == 409:
                raise ConflictError(f"{kind} {namespace}/{name} was modified concurrently") from e
            raise

    def delete(self, kind: str, namespace: str, name: str) -> bool:
        """Delete an object. Returns False when it did not exist."""
        try:
            if kind in CORE_RESOURCES:
                method = getattr(self.core_api, f"delete_namespaced_{CORE_RESOURCES[kind]}")
                self._call(f"delete_{kind.lower()}", method, name=name, namespace=namespace)
                return True

            res = self._resource(kind)
            self._call(
                f"delete_{kind.lower()}",
                self.custom_api.delete_namespaced_custom_object,
                group=res.group,
                version=res.version,
                namespace=namespace,
                plural=res.plural,
                name=name,
            )
            return True
        except client.exceptions.ApiException as e:
            if e.status == 404:
                return False
            raise

    def patch_status(self, kind: str, namespace: str, name: str, status: dict[str, Any]) -> None:
        """Merge-patch the status subresource of a custom object."""
        res = self._resource(kind)
        try:
            self._call(
                f"patch_status_{kind.lower()}",
                self.custom_api.patch_namespaced_custom_object_status,
                group=res.group,
                version=res.version,
                namespace=namespace,
                plural=res.plural,
                name=name,
                body={"status": status},
                field_manager=FIELD_MANAGER,
            )
        except client.exceptions.ApiException as e:
            if e.status == 409:
                raise ConflictError(f"{kind} {namespace}/{name} status was modified concurrently") from e
            raise


def create_object_store() -> KubernetesObjectStore:
    """Create a KubernetesObjectStore from in-cluster config, falling back to kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()

    return KubernetesObjectStore()
