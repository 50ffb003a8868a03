from linode_node_decorator.core.constants import BACKEND_KUBERNETES, BACKEND_SWARM
from linode_node_decorator.core.errors import ConfigError


def make_node_store(backend):
    """Construct the node store for the configured cluster backend."""
    if backend == BACKEND_KUBERNETES:
        from linode_node_decorator.lib.nodes.kubernetes_store import KubernetesNodeStore
        return KubernetesNodeStore()
    if backend == BACKEND_SWARM:
        from linode_node_decorator.lib.nodes.swarm_store import SwarmNodeStore
        return SwarmNodeStore()
    raise ConfigError(f"unknown cluster backend {backend!r}")
