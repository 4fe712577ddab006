"""Builders for the HostedCluster and NodePool manifests."""

from __future__ import annotations

import copy
from typing import Any

from ..constants import (
    ENCRYPTION_TYPE_AESCBC,
    ETCD_ENCRYPTION_KEY_SUFFIX,
    HYPERSHIFT_API_GROUP_VERSION,
    KIND_HOSTED_CLUSTER,
    KIND_NODE_POOL,
)
from .manifests import get_target_namespace, manifest_key


def default_secret_encryption(name: str) -> dict[str, Any]:
    """AES-CBC secret encryption using the conventional active key name."""
    return {
        "type": ENCRYPTION_TYPE_AESCBC,
        "aescbc": {"activeKey": {"name": f"{name}{ETCD_ENCRYPTION_KEY_SUFFIX}"}},
    }


def scaffold_hosted_cluster_spec(intent: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any] | None]:
    """Fill in the defaults of a HypershiftDeployment's hostedClusterSpec.

    - When the operator configures the infrastructure and no secret
      encryption is set, AES-CBC with ``<name>-etcd-encryption-key`` is used.
      An existing policy is never replaced.
    - hostedClusterOnlyConfigItems are appended to configuration.items.

    Args:
        intent: HypershiftDeployment object

    Returns:
        Tuple of (defaulted hostedClusterSpec, secretEncryption to persist or None)
    """
    spec = intent.get("spec") or {}
    name = (intent.get("metadata") or {}).get("name", "")
    hc_spec = copy.deepcopy(spec.get("hostedClusterSpec") or {})

    encryption_default = None
    configure = (spec.get("infrastructure") or {}).get("configure", False)
    if configure and not hc_spec.get("secretEncryption"):
        encryption_default = default_secret_encryption(name)
        hc_spec["secretEncryption"] = copy.deepcopy(encryption_default)

    hc_only_items = spec.get("hostedClusterOnlyConfigItems") or []
    if hc_only_items:
        configuration = hc_spec.setdefault("configuration", {})
        items = configuration.setdefault("items", [])
        present = {manifest_key(item) for item in items}
        for item in hc_only_items:
            if manifest_key(item) not in present:
                items.append(copy.deepcopy(item))
                present.add(manifest_key(item))

    return hc_spec, encryption_default


def build_hosted_cluster(intent: dict[str, Any], hosted_cluster_spec: dict[str, Any]) -> dict[str, Any]:
    """Build the HostedCluster manifest."""
    return {
        "apiVersion": HYPERSHIFT_API_GROUP_VERSION,
        "kind": KIND_HOSTED_CLUSTER,
        "metadata": {
            "name": intent["metadata"]["name"],
            "namespace": get_target_namespace(intent),
        },
        "spec": copy.deepcopy(hosted_cluster_spec),
    }


def build_node_pools(intent: dict[str, Any]) -> list[dict[str, Any]]:
    """Build one NodePool manifest per entry of spec.nodePools, in spec order."""
    name = intent["metadata"]["name"]
    namespace = get_target_namespace(intent)
    node_pools = []
    for node_pool in (intent.get("spec") or {}).get("nodePools") or []:
        np_spec = copy.deepcopy(node_pool.get("spec") or {})
        np_spec.setdefault("clusterName", name)
        node_pools.append({
            "apiVersion": HYPERSHIFT_API_GROUP_VERSION,
            "kind": KIND_NODE_POOL,
            "metadata": {"name": node_pool["name"], "namespace": namespace},
            "spec": np_spec,
        })
    return node_pools
