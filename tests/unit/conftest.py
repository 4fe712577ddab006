"""Shared fixtures for unit tests."""

from __future__ import annotations

import copy
from typing import Any
from unittest.mock import patch

import pytest

from hypershift_deployment_operator.utils.errors import AlreadyExistsError, ConflictError


class FakeObjectStore:
    """In-memory ObjectStore keyed by (kind, namespace, name)."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str, str], dict[str, Any]] = {}
        self.calls: list[tuple[str, str, str, str]] = []

    @staticmethod
    def _key(obj: dict[str, Any]) -> tuple[str, str, str]:
        metadata = obj.get("metadata") or {}
        return obj["kind"], metadata.get("namespace", ""), metadata["name"]

    def add(self, obj: dict[str, Any]) -> dict[str, Any]:
        self.objects[self._key(obj)] = copy.deepcopy(obj)
        return obj

    def add_secret(self, namespace: str, name: str, data: dict[str, str] | None = None) -> dict[str, Any]:
        return self.add({
            "apiVersion": "v1",
            "kind": "Secret",
            "metadata": {"name": name, "namespace": namespace, "uid": f"uid-{name}", "resourceVersion": "1"},
            "type": "Opaque",
            "data": data if data is not None else {"key": f"{name}-data"},
        })

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any] | None:
        self.calls.append(("get", kind, namespace, name))
        obj = self.objects.get((kind, namespace, name))
        return copy.deepcopy(obj) if obj is not None else None

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        key = self._key(obj)
        self.calls.append(("create",) + key)
        if key in self.objects:
            raise AlreadyExistsError(f"{key} already exists")
        self.objects[key] = copy.deepcopy(obj)
        return copy.deepcopy(obj)

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        key = self._key(obj)
        self.calls.append(("update",) + key)
        if key not in self.objects:
            raise ConflictError(f"{key} does not exist")
        self.objects[key] = copy.deepcopy(obj)
        return copy.deepcopy(obj)

    def delete(self, kind: str, namespace: str, name: str) -> bool:
        self.calls.append(("delete", kind, namespace, name))
        return self.objects.pop((kind, namespace, name), None) is not None

    def patch_status(self, kind: str, namespace: str, name: str, status: dict[str, Any]) -> None:
        self.calls.append(("patch_status", kind, namespace, name))
        obj = self.objects[(kind, namespace, name)]
        obj.setdefault("status", {}).update(copy.deepcopy(status))

    def writes(self) -> list[tuple[str, str, str, str]]:
        return [call for call in self.calls if call[0] != "get"]


def make_intent(
    name: str = "cluster1",
    namespace: str = "clusters",
    configure: bool = False,
    secret_encryption: dict[str, Any] | None = None,
    node_pools: list[str] | None = None,
    finalizers: list[str] | None = None,
    annotations: dict[str, str] | None = None,
    hosting_cluster: str | None = "local-cluster",
) -> dict[str, Any]:
    """Build a HypershiftDeployment object with AWS credentials and a pull secret."""
    hc_spec: dict[str, Any] = {
        "release": {"image": "quay.io/openshift-release-dev/ocp-release:4.10.0-x86_64"},
        "platform": {
            "type": "AWS",
            "aws": {
                "region": "us-east-1",
                "controlPlaneOperatorCreds": {"name": f"{name}-cpo-creds"},
                "kubeCloudControllerCreds": {"name": f"{name}-cloud-ctrl-creds"},
                "nodePoolManagementCreds": {"name": f"{name}-node-mgmt-creds"},
            },
        },
        "pullSecret": {"name": f"{name}-pull-secret"},
    }
    if secret_encryption is not None:
        hc_spec["secretEncryption"] = secret_encryption

    metadata: dict[str, Any] = {"name": name, "namespace": namespace, "uid": "uid-1", "generation": 1}
    if finalizers is not None:
        metadata["finalizers"] = finalizers
    if annotations:
        metadata["annotations"] = annotations

    spec: dict[str, Any] = {
        "infrastructure": {"configure": configure},
        "hostedClusterSpec": hc_spec,
        "nodePools": [
            {"name": np_name, "spec": {"replicas": 2, "platform": {"type": "AWS"}}}
            for np_name in (node_pools if node_pools is not None else [name])
        ],
    }
    if hosting_cluster:
        spec["hostingCluster"] = hosting_cluster

    return {
        "apiVersion": "cluster.open-cluster-management.io/v1alpha1",
        "kind": "HypershiftDeployment",
        "metadata": metadata,
        "spec": spec,
    }


def add_platform_secrets(store: FakeObjectStore, name: str = "cluster1", namespace: str = "clusters") -> None:
    for suffix in ("cpo-creds", "cloud-ctrl-creds", "node-mgmt-creds", "pull-secret"):
        store.add_secret(namespace, f"{name}-{suffix}")


@pytest.fixture
def store() -> FakeObjectStore:
    """Object store seeded with the platform secrets of the default intent."""
    fake = FakeObjectStore()
    add_platform_secrets(fake)
    return fake


@pytest.fixture(autouse=True)
def mock_kopf_event():
    """kopf.event needs a running operator; record calls instead."""
    with patch("hypershift_deployment_operator.utils.events.kopf.event") as mock_event:
        yield mock_event
