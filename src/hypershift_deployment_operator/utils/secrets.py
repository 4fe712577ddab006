"""Utilities for building Secret manifests."""

from __future__ import annotations

import base64
import copy
import secrets
from typing import Any

from ..constants import AESCBC_KEY_BYTES, AESCBC_KEY_SECRET_KEY, KIND_SECRET


def rehome_secret(secret: dict[str, Any], namespace: str, name: str | None = None) -> dict[str, Any]:
    """Copy a Secret into a manifest for the target namespace.

    Only the name, labels, type and data travel with the copy; server-side
    metadata (uid, resourceVersion, owner references, annotations) is dropped.

    Args:
        secret: Secret object as a dict (data values base64 encoded)
        namespace: Target namespace
        name: Name for the copy (defaults to the source name)

    Returns:
        Secret manifest dict
    """
    metadata = secret.get("metadata") or {}
    out: dict[str, Any] = {
        "apiVersion": "v1",
        "kind": KIND_SECRET,
        "metadata": {
            "name": name or metadata.get("name"),
            "namespace": namespace,
        },
    }
    labels = metadata.get("labels")
    if labels:
        out["metadata"]["labels"] = dict(labels)
    if secret.get("type"):
        out["type"] = secret["type"]
    out["data"] = copy.deepcopy(secret.get("data") or {})
    return out


def generate_encryption_key() -> str:
    """Generate a random AES-CBC key, base64 encoded."""
    return base64.b64encode(secrets.token_bytes(AESCBC_KEY_BYTES)).decode("utf-8")


def generate_encryption_key_secret(name: str, namespace: str) -> dict[str, Any]:
    """Build a Secret manifest holding a freshly generated etcd encryption key.

    Args:
        name: Secret name
        namespace: Target namespace

    Returns:
        Secret manifest dict
    """
    return {
        "apiVersion": "v1",
        "kind": KIND_SECRET,
        "metadata": {"name": name, "namespace": namespace},
        "type": "Opaque",
        "data": {AESCBC_KEY_SECRET_KEY: generate_encryption_key()},
    }
