"""Helpers for ManifestWork payload manifests."""

from __future__ import annotations

import copy
from typing import Any, Iterable, NamedTuple

from ..constants import ANNOTATION_TARGET_NAMESPACE


class ManifestKey(NamedTuple):
    """Identity of a manifest inside a ManifestWork."""

    kind: str
    namespace: str
    name: str


def manifest_key(manifest: dict[str, Any]) -> ManifestKey:
    metadata = manifest.get("metadata") or {}
    return ManifestKey(manifest.get("kind", ""), metadata.get("namespace", ""), metadata.get("name", ""))


def get_target_namespace(intent: dict[str, Any]) -> str:
    """Namespace every payload manifest is written to.

    The manifestwork-target-namespace annotation wins; otherwise the
    HypershiftDeployment's own namespace is used.
    """
    metadata = intent.get("metadata") or {}
    annotations = metadata.get("annotations") or {}
    return annotations.get(ANNOTATION_TARGET_NAMESPACE) or metadata.get("namespace", "default")


def rehome_object(obj: dict[str, Any], namespace: str) -> dict[str, Any]:
    """Deep-copy an object into the target namespace, dropping server-side metadata."""
    out = copy.deepcopy(obj)
    metadata = out.get("metadata") or {}
    for field in ("uid", "resourceVersion", "creationTimestamp", "generation", "managedFields", "ownerReferences", "selfLink"):
        metadata.pop(field, None)
    metadata["namespace"] = namespace
    out["metadata"] = metadata
    out.pop("status", None)
    return out


def find_manifest(
    manifests: Iterable[dict[str, Any]],
    kind: str,
    name: str,
    namespace: str | None = None,
) -> dict[str, Any] | None:
    """Find a manifest by kind and name (and namespace, when given)."""
    for manifest in manifests:
        key = manifest_key(manifest)
        if key.kind != kind or key.name != name:
            continue
        if namespace is not None and key.namespace != namespace:
            continue
        return manifest
    return None


def dedupe_manifests(manifests: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Drop manifests whose (kind, namespace, name) was already seen; first occurrence wins."""
    seen: set[ManifestKey] = set()
    result = []
    for manifest in manifests:
        key = manifest_key(manifest)
        if key in seen:
            continue
        seen.add(key)
        result.append(manifest)
    return result
