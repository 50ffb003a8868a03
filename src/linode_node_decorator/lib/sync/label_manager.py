"""
label_manager.py
- Projects a Linode instance Snapshot onto a node's labels and persists them.
- Only the keys in LABEL_SCHEMA are ever written; every other label is left alone.
- Saves on every call, even when nothing changed, so a failed save is retried by the next sync.
- Every managed key is marked pending on the node, so stores write back only those keys.
"""

from loguru import logger

from linode_node_decorator.core.constants import LABEL_SCHEMA


def labels_for(snapshot):
    """Return the managed labels for a snapshot, e.g. {"linode_id": "123", ...}."""
    return {label_key: str(getattr(snapshot, field)) for field, label_key in LABEL_SCHEMA.items()}


class LabelSynchronizer:
    def __init__(self, store, dry_run=False):
        self.store = store
        self.dry_run = dry_run

        # --- Counters ---
        self.applied_total = 0
        self.failed_total = 0

    def apply(self, node, snapshot):
        """
        Overwrite the managed labels on node and save it through the store.

        Raises NodeStoreError if the save fails. The in-memory labels are not rolled back.
        """
        desired = labels_for(snapshot)
        changed = {k: v for k, v in desired.items() if node.labels.get(k) != v}
        for key, value in desired.items():
            node.set_label(key, value)

        if changed:
            logger.info(f"[label_sync] Updating labels on {node.name}: {changed}")
        else:
            logger.debug(f"[label_sync] Labels on {node.name} already current, saving anyway.")

        if self.dry_run:
            logger.info(f"[label_sync] (Dry Run) Would save {node.name} with {desired}")
            return desired

        try:
            self.store.save(node)
        except Exception:
            self.failed_total += 1
            raise
        self.applied_total += 1
        return desired
