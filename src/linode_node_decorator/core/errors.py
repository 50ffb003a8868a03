"""
errors.py
- Exception hierarchy shared by the metadata client, node stores and sync loop.
"""


class NodeDecoratorError(Exception):
    """Base class for all errors raised by the decorator."""


class ConfigError(NodeDecoratorError):
    """Invalid or missing configuration. Always fatal at startup."""


class MetadataError(NodeDecoratorError):
    """The instance metadata service could not be reached or returned bad data."""


class NodeStoreError(NodeDecoratorError):
    """Reading or writing the cluster node object failed."""


class NodeNotFoundError(NodeStoreError):
    def __init__(self, name):
        super().__init__(f"node {name!r} not found")
        self.name = name


class WatcherError(NodeDecoratorError):
    """Misuse of an InstanceWatcher, e.g. starting it twice."""
