"""
swarm_store.py
- Reads and writes this machine's Docker Swarm node spec through the Docker SDK.
- Swarm replaces the whole spec on update, so save() reloads the node and layers only the
  labels written since the last read or save on top; Role and Availability are carried over.
- Daemon and socket failures surface as NodeStoreError.
"""

import docker
import requests
from docker.errors import DockerException, NotFound
from loguru import logger

from linode_node_decorator.core.errors import ConfigError, NodeNotFoundError, NodeStoreError
from linode_node_decorator.core.models import NodeRef

BACKEND_ERRORS = (DockerException, requests.RequestException)


class SwarmNodeStore:
    def __init__(self, client=None):
        if client is None:
            try:
                client = docker.from_env()
            except BACKEND_ERRORS as e:
                raise ConfigError(f"cannot connect to the Docker daemon: {e}") from e
        self.client = client

    def _find(self, name):
        try:
            return self.client.nodes.get(name)
        except NotFound:
            pass
        except BACKEND_ERRORS as e:
            raise NodeStoreError(f"failed to get node {name}: {e}") from e

        # nodes.get() only matches IDs; fall back to a hostname lookup
        try:
            for node in self.client.nodes.list():
                if node.attrs["Description"]["Hostname"] == name:
                    return node
        except BACKEND_ERRORS as e:
            raise NodeStoreError(f"failed to list swarm nodes: {e}") from e
        raise NodeNotFoundError(name)

    def get_by_name(self, name):
        node = self._find(name)
        labels = dict(node.attrs["Spec"].get("Labels") or {})
        return NodeRef(name=name, labels=labels, handle=node)

    def save(self, node):
        changes = node.pending_labels()
        if not changes:
            logger.debug(f"[nodes] No pending labels for {node.name}, skipping update.")
            return

        swarm_node = node.handle
        try:
            swarm_node.reload()
            spec = swarm_node.attrs["Spec"]
            labels = dict(spec.get("Labels") or {})
            labels.update(changes)
            swarm_node.update({
                "Availability": spec["Availability"],
                "Role": spec["Role"],
                "Labels": labels,
            })
        except BACKEND_ERRORS as e:
            raise NodeStoreError(f"failed to update labels on node {node.name}: {e}") from e
        node.mark_saved()
        logger.debug(f"[nodes] Updated labels on swarm node {node.name}: {sorted(changes)}")
