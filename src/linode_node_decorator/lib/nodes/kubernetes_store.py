"""
kubernetes_store.py
- Reads and writes this machine's Kubernetes Node object.
- save() sends a merge patch of only the labels written since the last read or save,
  so labels owned by operators or other controllers are never touched.
- Transport failures (API server down, connection refused) surface as NodeStoreError.
"""

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from loguru import logger
from urllib3.exceptions import HTTPError

from linode_node_decorator.core.errors import ConfigError, NodeNotFoundError, NodeStoreError
from linode_node_decorator.core.models import NodeRef


def load_kube_config():
    """In-cluster service account first, local kubeconfig as a fallback for development."""
    try:
        config.load_incluster_config()
        logger.debug("[nodes] Using in-cluster Kubernetes configuration.")
    except ConfigException:
        try:
            config.load_kube_config()
            logger.debug("[nodes] Using local kubeconfig.")
        except ConfigException as e:
            raise ConfigError(f"no usable Kubernetes configuration: {e}") from e


class KubernetesNodeStore:
    def __init__(self, api=None):
        if api is None:
            load_kube_config()
            api = client.CoreV1Api()
        self.api = api

    def get_by_name(self, name):
        try:
            node = self.api.read_node(name)
        except ApiException as e:
            if e.status == 404:
                raise NodeNotFoundError(name) from e
            raise NodeStoreError(f"failed to get node {name}: {e.reason}") from e
        except HTTPError as e:
            raise NodeStoreError(f"cannot reach the Kubernetes API to get node {name}: {e}") from e

        labels = dict(node.metadata.labels or {})
        return NodeRef(name=name, labels=labels, handle=node)

    def save(self, node):
        changes = node.pending_labels()
        if not changes:
            logger.debug(f"[nodes] No pending labels for {node.name}, skipping patch.")
            return

        body = {"metadata": {"labels": changes}}
        try:
            updated = self.api.patch_node(node.name, body)
        except ApiException as e:
            raise NodeStoreError(f"failed to update labels on node {node.name}: {e.reason}") from e
        except HTTPError as e:
            raise NodeStoreError(f"cannot reach the Kubernetes API to update node {node.name}: {e}") from e
        node.handle = updated
        node.mark_saved()
        logger.debug(f"[nodes] Patched labels on Kubernetes node {node.name}: {sorted(changes)}")
