"""
models.py
- Value types passed between the metadata source, the watcher and the node stores.
    - Snapshot: one immutable observation of the Linode instance
    - NodeRef: the cluster's record of this machine, with a mutable label mapping
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Set

from linode_node_decorator.core.errors import MetadataError


@dataclass(frozen=True)
class Snapshot:
    label: str
    id: int
    region: str
    type: str
    host_uuid: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Snapshot":
        """
        Build a Snapshot from the metadata service's /v1/instance payload.

        Extra keys (specs, backups, tags) are ignored. Missing or null fields raise MetadataError.
        """
        if not isinstance(data, dict):
            raise MetadataError(f"instance payload must be an object, got {type(data).__name__}")
        missing = [key for key in ("label", "id", "region", "type", "host_uuid") if data.get(key) is None]
        if missing:
            raise MetadataError(f"instance payload is missing {', '.join(missing)}")
        try:
            return cls(
                label=str(data["label"]),
                id=int(data["id"]),
                region=str(data["region"]),
                type=str(data["type"]),
                host_uuid=str(data["host_uuid"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MetadataError(f"malformed instance payload: {e!r}") from e


@dataclass
class NodeRef:
    name: str
    labels: Dict[str, str] = field(default_factory=dict)
    handle: Optional[Any] = field(default=None, repr=False, compare=False)
    # keys written since the last read or successful save
    pending: Set[str] = field(default_factory=set, repr=False, compare=False)

    def set_label(self, key: str, value: str) -> None:
        self.labels[key] = value
        self.pending.add(key)

    def pending_labels(self) -> Dict[str, str]:
        """Labels a store should write back; everything else in labels may be stale."""
        return {key: self.labels[key] for key in sorted(self.pending)}

    def mark_saved(self) -> None:
        self.pending.clear()


class MetadataSource(Protocol):
    def fetch(self) -> Snapshot: ...


class NodeStore(Protocol):
    def get_by_name(self, name: str) -> NodeRef: ...

    def save(self, node: NodeRef) -> None: ...
