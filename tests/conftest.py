"""Shared fakes for the metadata source and the node store."""

from linode_node_decorator.core.errors import NodeNotFoundError, NodeStoreError
from linode_node_decorator.core.models import NodeRef, Snapshot


def make_snapshot(**overrides):
    fields = {
        "label": "my-node",
        "id": 123,
        "region": "us-east",
        "type": "g6-standard-2",
        "host_uuid": "abc",
    }
    fields.update(overrides)
    return Snapshot(**fields)


class FakeSource:
    """Returns scripted results in order; an Exception instance is raised instead of returned.

    Once the script runs out the last result repeats.
    """

    def __init__(self, results):
        self.results = list(results)
        self.calls = 0

    def fetch(self):
        idx = min(self.calls, len(self.results) - 1)
        self.calls += 1
        result = self.results[idx]
        if isinstance(result, Exception):
            raise result
        return result


class FakeStore:
    def __init__(self, nodes=None, fail_saves=0):
        self.nodes = nodes if nodes is not None else {}
        self.fail_saves = fail_saves
        self.saved = []

    def get_by_name(self, name):
        if name not in self.nodes:
            raise NodeNotFoundError(name)
        return NodeRef(name=name, labels=dict(self.nodes[name]))

    def save(self, node):
        if self.fail_saves:
            self.fail_saves -= 1
            raise NodeStoreError("apiserver unavailable")
        self.nodes[node.name] = dict(node.labels)
        node.mark_saved()
        self.saved.append(dict(node.labels))


