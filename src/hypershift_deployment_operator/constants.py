"""Constants for the HypershiftDeployment Operator."""

import os

# API Group
API_GROUP = "cluster.open-cluster-management.io"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# ManifestWork API
WORK_API_GROUP = "work.open-cluster-management.io"
WORK_API_VERSION = "v1"
WORK_API_GROUP_VERSION = f"{WORK_API_GROUP}/{WORK_API_VERSION}"

# HyperShift API
HYPERSHIFT_API_GROUP = "hypershift.openshift.io"
HYPERSHIFT_API_VERSION = "v1alpha1"
HYPERSHIFT_API_GROUP_VERSION = f"{HYPERSHIFT_API_GROUP}/{HYPERSHIFT_API_VERSION}"

# Resource Kinds
KIND_HYPERSHIFT_DEPLOYMENT = "HypershiftDeployment"
KIND_MANIFEST_WORK = "ManifestWork"
KIND_HOSTED_CLUSTER = "HostedCluster"
KIND_NODE_POOL = "NodePool"
KIND_SECRET = "Secret"
KIND_CONFIG_MAP = "ConfigMap"

# Annotations
ANNOTATION_TARGET_NAMESPACE = "manifestwork-target-namespace"
ANNOTATION_CREATED_BY = "created-by-hypershiftdeployment"
NAMESPACE_NAME_SEPARATOR = "/"

# Finalizers
FINALIZER = "hypershiftdeployment.cluster.open-cluster-management.io/finalizer"

# Field Manager
FIELD_MANAGER = "hypershift-deployment-operator"

# Secret encryption
ENCRYPTION_TYPE_AESCBC = "aescbc"
ENCRYPTION_TYPE_KMS = "kms"
ETCD_ENCRYPTION_KEY_SUFFIX = "-etcd-encryption-key"
ETCD_ENCRYPTION_BACKUP_KEY_SUFFIX = "-etcd-encryption-backup-key"
AESCBC_KEY_SECRET_KEY = "key"
AESCBC_KEY_BYTES = 32

# Condition Types
COND_WORK_CONFIGURED = "ManifestWorkConfigured"
COND_HOSTED_CLUSTER_AVAILABLE = "HostedClusterAvailable"
COND_HOSTED_CLUSTER_PROGRESS = "HostedClusterProgress"
COND_NODE_POOL_READY = "NodePoolReady"

# Condition Reasons
REASON_WORK_CREATED = "ManifestWorkCreated"
REASON_WORK_APPLIED = "ManifestWorkApplied"
REASON_MISCONFIGURED = "MisConfiguredManifestWork"
REASON_FEEDBACK_MISSING = "StatusFeedbackMissing"
REASON_NOT_REPORTED = "ReasonNotReported"
PROGRESS_COMPLETED = "Completed"

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_WORK_CREATED = "ManifestWorkCreated"
EVENT_REASON_WORK_UPDATED = "ManifestWorkUpdated"
EVENT_REASON_WORK_DELETED = "ManifestWorkDeleted"
EVENT_REASON_CONFIGURATION_FAILED = "ConfigurationFailed"
EVENT_REASON_WAITING_FOR_CLEANUP = "WaitingForCleanup"

# Requeue delays (seconds)
REQUEUE_DELAY_SECONDS = float(os.getenv("REQUEUE_DELAY_SECONDS", "10"))
FINALIZER_REQUEUE_SECONDS = float(os.getenv("FINALIZER_REQUEUE_SECONDS", "1"))
STATUS_SYNC_INTERVAL_SECONDS = int(os.getenv("STATUS_SYNC_INTERVAL_SECONDS", "60"))
