"""Tests for the Kubernetes-backed object store."""

from __future__ import annotations

from unittest.mock import MagicMock, Mock, patch

import pytest
from kubernetes import client

from hypershift_deployment_operator.services.store import KubernetesObjectStore, create_object_store
from hypershift_deployment_operator.utils.errors import AlreadyExistsError, ConflictError


@pytest.fixture(autouse=True)
def no_rate_limit_sleep():
    with patch("hypershift_deployment_operator.utils.rate_limit.time.sleep"):
        yield


@pytest.fixture
def k8s_store() -> KubernetesObjectStore:
    api_client = MagicMock()
    api_client.sanitize_for_serialization.side_effect = lambda obj: {"serialized": obj.name}
    store = KubernetesObjectStore(api_client=api_client)
    store.core_api = Mock()
    store.custom_api = Mock()
    return store


WORK = {
    "apiVersion": "work.open-cluster-management.io/v1",
    "kind": "ManifestWork",
    "metadata": {"name": "cluster1", "namespace": "local-cluster"},
    "spec": {},
}


class TestGet:
    """Test cases for KubernetesObjectStore.get."""

    def test_get_secret_uses_core_api(self, k8s_store):
        secret = Mock()
        secret.name = "ps"
        k8s_store.core_api.read_namespaced_secret.return_value = secret

        result = k8s_store.get("Secret", "clusters", "ps")

        assert result == {"serialized": "ps"}
        k8s_store.core_api.read_namespaced_secret.assert_called_once_with(name="ps", namespace="clusters")

    def test_get_config_map_uses_core_api(self, k8s_store):
        k8s_store.core_api.read_namespaced_config_map.return_value = {"kind": "ConfigMap"}

        assert k8s_store.get("ConfigMap", "clusters", "cm") == {"kind": "ConfigMap"}

    def test_get_custom_object(self, k8s_store):
        k8s_store.custom_api.get_namespaced_custom_object.return_value = WORK

        assert k8s_store.get("ManifestWork", "local-cluster", "cluster1") == WORK
        k8s_store.custom_api.get_namespaced_custom_object.assert_called_once_with(
            group="work.open-cluster-management.io",
            version="v1",
            namespace="local-cluster",
            plural="manifestworks",
            name="cluster1",
        )

    def test_not_found_returns_none(self, k8s_store):
        k8s_store.custom_api.get_namespaced_custom_object.side_effect = client.exceptions.ApiException(status=404)

        assert k8s_store.get("NodePool", "clusters", "np") is None

    def test_other_errors_propagate(self, k8s_store):
        k8s_store.core_api.read_namespaced_secret.side_effect = client.exceptions.ApiException(status=500)

        with pytest.raises(client.exceptions.ApiException):
            k8s_store.get("Secret", "clusters", "ps")

    def test_unsupported_kind(self, k8s_store):
        with pytest.raises(ValueError, match="Unsupported kind"):
            k8s_store.get("Deployment", "clusters", "d")


class TestWrites:
    """Test cases for create, update, delete and patch_status."""

    def test_create_custom_object(self, k8s_store):
        k8s_store.custom_api.create_namespaced_custom_object.return_value = WORK

        assert k8s_store.create(WORK) == WORK
        kwargs = k8s_store.custom_api.create_namespaced_custom_object.call_args[1]
        assert kwargs["plural"] == "manifestworks"
        assert kwargs["body"] == WORK
        assert kwargs["field_manager"] == "hypershift-deployment-operator"

    def test_create_conflict_is_already_exists(self, k8s_store):
        k8s_store.custom_api.create_namespaced_custom_object.side_effect = client.exceptions.ApiException(status=409)

        with pytest.raises(AlreadyExistsError):
            k8s_store.create(WORK)

    def test_update_conflict(self, k8s_store):
        k8s_store.custom_api.replace_namespaced_custom_object.side_effect = client.exceptions.ApiException(status=409)

        with pytest.raises(ConflictError):
            k8s_store.update(WORK)

    def test_update_replaces_by_name(self, k8s_store):
        k8s_store.custom_api.replace_namespaced_custom_object.return_value = WORK

        k8s_store.update(WORK)

        kwargs = k8s_store.custom_api.replace_namespaced_custom_object.call_args[1]
        assert (kwargs["namespace"], kwargs["name"]) == ("local-cluster", "cluster1")

    def test_delete(self, k8s_store):
        assert k8s_store.delete("ManifestWork", "local-cluster", "cluster1") is True

    def test_delete_not_found_is_false(self, k8s_store):
        k8s_store.custom_api.delete_namespaced_custom_object.side_effect = client.exceptions.ApiException(status=404)

        assert k8s_store.delete("ManifestWork", "local-cluster", "cluster1") is False

    def test_patch_status(self, k8s_store):
        k8s_store.patch_status("HypershiftDeployment", "clusters", "cluster1", {"conditions": []})

        kwargs = k8s_store.custom_api.patch_namespaced_custom_object_status.call_args[1]
        assert kwargs["plural"] == "hypershiftdeployments"
        assert kwargs["body"] == {"status": {"conditions": []}}

    def test_rate_limited_call_is_retried(self, k8s_store):
        k8s_store.custom_api.get_namespaced_custom_object.side_effect = [
            client.exceptions.ApiException(status=429),
            WORK,
        ]

        assert k8s_store.get("ManifestWork", "local-cluster", "cluster1") == WORK


@patch("hypershift_deployment_operator.services.store.client.ApiClient")
@patch("hypershift_deployment_operator.services.store.config")
def test_create_object_store_falls_back_to_kubeconfig(mock_config, mock_api_client):
    mock_config.ConfigException = Exception
    mock_config.load_incluster_config.side_effect = Exception("not in cluster")

    store = create_object_store()

    mock_config.load_kube_config.assert_called_once()
    assert isinstance(store, KubernetesObjectStore)
