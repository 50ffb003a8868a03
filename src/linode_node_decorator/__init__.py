"""
linode_node_decorator
- Keeps a cluster node's labels in sync with its Linode instance metadata.
"""

__version__ = "0.1.0"
