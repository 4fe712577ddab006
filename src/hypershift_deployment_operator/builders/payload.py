"""Assembly of the manifest list carried by a HypershiftDeployment's ManifestWork."""

from __future__ import annotations

from typing import Any, Sequence

from .. import metrics
from ..constants import KIND_CONFIG_MAP, KIND_SECRET
from ..services.store import ObjectStore
from ..utils.errors import ResolutionError
from ..utils.secrets import rehome_secret
from .encryption import resolve_encryption_secrets
from .hosted_cluster import build_hosted_cluster, build_node_pools, scaffold_hosted_cluster_spec
from .manifests import dedupe_manifests, get_target_namespace, manifest_key, rehome_object

# (spec field, description used in error messages)
AWS_CREDENTIAL_REFS = (
    ("controlPlaneOperatorCreds", "control plane operator creds"),
    ("kubeCloudControllerCreds", "kube cloud controller creds"),
    ("nodePoolManagementCreds", "node pool management creds"),
)


def _ref_name(ref: Any) -> str | None:
    if not isinstance(ref, dict):
        return None
    return ref.get("name") or None


def _fetch_secret(store: ObjectStore, namespace: str, name: str, description: str) -> dict[str, Any]:
    secret = store.get(KIND_SECRET, namespace, name)
    if secret is None:
        raise ResolutionError(
            f"failed to get the {description} {namespace}/{name}: not found",
            namespace=namespace,
            name=name,
        )
    return secret


def build_credential_secrets(
    intent: dict[str, Any], hosted_cluster_spec: dict[str, Any], store: ObjectStore
) -> list[dict[str, Any]]:
    """Copy the platform credential, pull and SSH key secrets into the target namespace.

    Raises:
        ResolutionError: If a referenced secret does not exist
    """
    source_namespace = intent["metadata"].get("namespace", "default")
    target_namespace = get_target_namespace(intent)

    refs: list[tuple[str | None, str]] = []
    aws = (hosted_cluster_spec.get("platform") or {}).get("aws")
    if aws:
        for field, description in AWS_CREDENTIAL_REFS:
            name = _ref_name(aws.get(field))
            if not name:
                raise ResolutionError(f"platform.aws.{field} is required")
            refs.append((name, description))

    pull_secret = _ref_name(hosted_cluster_spec.get("pullSecret"))
    if not pull_secret:
        raise ResolutionError("pullSecret is required")
    refs.append((pull_secret, "pull secret"))

    ssh_key = _ref_name(hosted_cluster_spec.get("sshKey"))
    if ssh_key:
        refs.append((ssh_key, "ssh key secret"))

    return [
        rehome_secret(_fetch_secret(store, source_namespace, name, description), target_namespace)
        for name, description in refs
    ]


def build_configuration_objects(
    intent: dict[str, Any], hosted_cluster_spec: dict[str, Any], store: ObjectStore
) -> list[dict[str, Any]]:
    """Copy the secrets, config maps and inline items of hostedClusterSpec.configuration.

    Inline items that are listed in hostedClusterOnlyConfigItems stay inside
    the HostedCluster spec and are not shipped as standalone manifests.

    Raises:
        ResolutionError: If a referenced secret or config map does not exist
    """
    source_namespace = intent["metadata"].get("namespace", "default")
    target_namespace = get_target_namespace(intent)
    configuration = hosted_cluster_spec.get("configuration") or {}

    objects = []
    for ref in configuration.get("secretRefs") or []:
        name = _ref_name(ref)
        if name:
            secret = _fetch_secret(store, source_namespace, name, "configuration secret")
            objects.append(rehome_secret(secret, target_namespace))

    for ref in configuration.get("configMapRefs") or []:
        name = _ref_name(ref)
        if not name:
            continue
        config_map = store.get(KIND_CONFIG_MAP, source_namespace, name)
        if config_map is None:
            raise ResolutionError(
                f"failed to get the configuration config map {source_namespace}/{name}: not found",
                kind=KIND_CONFIG_MAP,
                namespace=source_namespace,
                name=name,
            )
        objects.append(rehome_object(config_map, target_namespace))

    hc_only = {manifest_key(item) for item in (intent.get("spec") or {}).get("hostedClusterOnlyConfigItems") or []}
    for item in configuration.get("items") or []:
        if manifest_key(item) in hc_only:
            continue
        objects.append(rehome_object(item, target_namespace))

    return objects


def build_payload(
    intent: dict[str, Any],
    store: ObjectStore,
    previous_manifests: Sequence[dict[str, Any]] = (),
    hosted_cluster_spec: dict[str, Any] | None = None,
) -> list[dict[str, Any]]:
    """Build the ordered manifest list for a HypershiftDeployment.

    Order: HostedCluster, NodePools, platform credential secrets, encryption
    secrets, configuration objects. Every manifest lands in the target
    namespace and duplicate identities are dropped (first wins).

    Args:
        intent: HypershiftDeployment object
        store: Object store used to read referenced secrets and config maps
        previous_manifests: Manifests of the existing ManifestWork (empty if none)
        hosted_cluster_spec: Already defaulted hostedClusterSpec; scaffolded from the intent when None

    Returns:
        List of manifests

    Raises:
        ResolutionError: If a credential or configuration object is missing
        AggregateResolutionError: If encryption secrets cannot be resolved
    """
    if hosted_cluster_spec is None:
        hosted_cluster_spec, _ = scaffold_hosted_cluster_spec(intent)

    manifests = [build_hosted_cluster(intent, hosted_cluster_spec)]
    manifests.extend(build_node_pools(intent))
    manifests.extend(build_credential_secrets(intent, hosted_cluster_spec, store))
    manifests.extend(resolve_encryption_secrets(intent, store, previous_manifests, hosted_cluster_spec))
    manifests.extend(build_configuration_objects(intent, hosted_cluster_spec, store))

    manifests = dedupe_manifests(manifests)
    metrics.manifestwork_payload_size.observe(len(manifests))
    return manifests
