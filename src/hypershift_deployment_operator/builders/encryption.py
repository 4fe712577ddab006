"""Resolution of the etcd secret-encryption Secrets shipped with a ManifestWork."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from .. import metrics
from ..constants import (
    ENCRYPTION_TYPE_AESCBC,
    ENCRYPTION_TYPE_KMS,
    ETCD_ENCRYPTION_BACKUP_KEY_SUFFIX,
    ETCD_ENCRYPTION_KEY_SUFFIX,
    KIND_SECRET,
)
from ..services.store import ObjectStore
from ..utils.errors import AggregateResolutionError, ResolutionError
from ..utils.secrets import generate_encryption_key_secret, rehome_secret
from .manifests import find_manifest, get_target_namespace

logger = logging.getLogger(__name__)

SLOT_ACTIVE = "active"
SLOT_BACKUP = "backup"
SLOT_KMS = "kms"

_CONVENTION_SUFFIX = {
    SLOT_ACTIVE: ETCD_ENCRYPTION_KEY_SUFFIX,
    SLOT_BACKUP: ETCD_ENCRYPTION_BACKUP_KEY_SUFFIX,
}


def _ref_name(ref: dict[str, Any] | None) -> str | None:
    if not ref:
        return None
    return ref.get("name") or None


def _resolve_named_secret(
    store: ObjectStore,
    source_namespace: str,
    target_namespace: str,
    secret_name: str,
    previous_manifests: Sequence[dict[str, Any]],
    slot: str,
) -> dict[str, Any] | None:
    """Look the secret up in the source namespace, then in the previous payload."""
    secret = store.get(KIND_SECRET, source_namespace, secret_name)
    if secret is not None:
        metrics.secret_resolution_total.labels(slot=slot, source="namespace").inc()
        return rehome_secret(secret, target_namespace)

    previous = find_manifest(previous_manifests, KIND_SECRET, secret_name)
    if previous is not None:
        metrics.secret_resolution_total.labels(slot=slot, source="previous_manifestwork").inc()
        return rehome_secret(previous, target_namespace)

    return None


def _resolve_aescbc_slot(
    intent: dict[str, Any],
    store: ObjectStore,
    previous_manifests: Sequence[dict[str, Any]],
    slot: str,
    secret_name: str,
) -> dict[str, Any]:
    """Resolve one AES-CBC key slot.

    Order: named secret in the source namespace, same name in the previous
    payload, then (for operator-configured infrastructure only) the
    conventionally named secret and, for the active slot, a generated key.

    Raises:
        ResolutionError: If nothing could be resolved
    """
    metadata = intent["metadata"]
    source_namespace = metadata.get("namespace", "default")
    target_namespace = get_target_namespace(intent)

    resolved = _resolve_named_secret(
        store, source_namespace, target_namespace, secret_name, previous_manifests, slot
    )
    if resolved is not None:
        return resolved

    configure = ((intent.get("spec") or {}).get("infrastructure") or {}).get("configure", False)
    if configure:
        convention_name = f"{metadata['name']}{_CONVENTION_SUFFIX[slot]}"
        if convention_name != secret_name:
            convention_secret = store.get(KIND_SECRET, source_namespace, convention_name)
            if convention_secret is not None:
                metrics.secret_resolution_total.labels(slot=slot, source="convention").inc()
                return rehome_secret(convention_secret, target_namespace, name=secret_name)

        if slot == SLOT_ACTIVE:
            logger.info(
                f"Generating etcd encryption key {target_namespace}/{secret_name} "
                f"for HypershiftDeployment {source_namespace}/{metadata['name']}"
            )
            metrics.secret_resolution_total.labels(slot=slot, source="generated").inc()
            return generate_encryption_key_secret(secret_name, target_namespace)

    metrics.secret_resolution_total.labels(slot=slot, source="unresolved").inc()
    raise ResolutionError(
        f"failed to get the {slot} key encryption secret {source_namespace}/{secret_name}: not found",
        namespace=source_namespace,
        name=secret_name,
    )


def _resolve_aescbc(
    intent: dict[str, Any],
    store: ObjectStore,
    previous_manifests: Sequence[dict[str, Any]],
    aescbc: dict[str, Any],
) -> tuple[list[dict[str, Any]], list[ResolutionError]]:
    name = intent["metadata"]["name"]
    slots = [(SLOT_ACTIVE, _ref_name(aescbc.get("activeKey")) or f"{name}{ETCD_ENCRYPTION_KEY_SUFFIX}")]
    backup_name = _ref_name(aescbc.get("backupKey"))
    if backup_name:
        slots.append((SLOT_BACKUP, backup_name))

    manifests: list[dict[str, Any]] = []
    errors: list[ResolutionError] = []
    for slot, secret_name in slots:
        try:
            manifests.append(_resolve_aescbc_slot(intent, store, previous_manifests, slot, secret_name))
        except ResolutionError as e:
            errors.append(e)
    return manifests, errors


def _resolve_kms(
    intent: dict[str, Any],
    store: ObjectStore,
    previous_manifests: Sequence[dict[str, Any]],
    kms: dict[str, Any],
) -> tuple[list[dict[str, Any]], list[ResolutionError]]:
    source_namespace = intent["metadata"].get("namespace", "default")
    auth = ((kms.get("aws") or {}).get("auth")) or {}
    secret_name = _ref_name(auth.get("credentials"))
    if not secret_name:
        return [], [ResolutionError("kms secret encryption requires aws.auth.credentials.name")]

    resolved = _resolve_named_secret(
        store, source_namespace, get_target_namespace(intent), secret_name, previous_manifests, SLOT_KMS
    )
    if resolved is None:
        metrics.secret_resolution_total.labels(slot=SLOT_KMS, source="unresolved").inc()
        return [], [ResolutionError(
            f"failed to get the kms credentials secret {source_namespace}/{secret_name}: not found",
            namespace=source_namespace,
            name=secret_name,
        )]
    return [resolved], []


def resolve_encryption_secrets(
    intent: dict[str, Any],
    store: ObjectStore,
    previous_manifests: Sequence[dict[str, Any]],
    hosted_cluster_spec: dict[str, Any] | None = None,
) -> list[dict[str, Any]]:
    """Resolve the Secrets required by the hostedClusterSpec's secretEncryption.

    Args:
        intent: HypershiftDeployment object
        store: Object store used to read source Secrets
        previous_manifests: Manifests of the existing ManifestWork (empty if none)
        hosted_cluster_spec: Defaulted hostedClusterSpec (defaults to the intent's own)

    Returns:
        Secret manifests, active key first

    Raises:
        AggregateResolutionError: Listing every secret that could not be resolved
    """
    if hosted_cluster_spec is None:
        hosted_cluster_spec = (intent.get("spec") or {}).get("hostedClusterSpec") or {}
    encryption = hosted_cluster_spec.get("secretEncryption")
    if not encryption:
        return []

    encryption_type = encryption.get("type")
    if encryption_type == ENCRYPTION_TYPE_AESCBC:
        manifests, errors = _resolve_aescbc(intent, store, previous_manifests, encryption.get("aescbc") or {})
    elif encryption_type == ENCRYPTION_TYPE_KMS:
        manifests, errors = _resolve_kms(intent, store, previous_manifests, encryption.get("kms") or {})
    else:
        manifests, errors = [], [ResolutionError(f"unsupported secret encryption type {encryption_type!r}")]

    if errors:
        raise AggregateResolutionError(errors)
    return manifests
