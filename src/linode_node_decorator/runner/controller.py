"""
controller.py
- Orchestrates one node's label lifecycle:
    - Init: resolve the node object by name (failure is fatal to the caller)
    - Bootstrap: one synchronous fetch + apply; a fetch failure is only logged
    - Steady state: consume watcher updates and errors, whichever arrives first
- The node's labels are only mutated from this coroutine, never from the watcher task.
"""

import asyncio

from loguru import logger

from linode_node_decorator.core.constants import DEFAULT_POLL_INTERVAL
from linode_node_decorator.core.errors import NodeStoreError
from linode_node_decorator.lib.sync.instance_watcher import InstanceWatcher
from linode_node_decorator.lib.sync.label_manager import LabelSynchronizer


class Controller:
    def __init__(self, node_name, store, source, interval=DEFAULT_POLL_INTERVAL, dry_run=False):
        self.node_name = node_name
        self.store = store
        self.source = source
        self.synchronizer = LabelSynchronizer(store, dry_run=dry_run)
        # built here so a bad interval fails before anything touches the cluster
        self.watcher = InstanceWatcher(source, interval=interval)
        self.node = None

    def init(self):
        """Fetch this machine's node object. Raises NodeStoreError on failure."""
        self.node = self.store.get_by_name(self.node_name)
        logger.info(f"[controller] Managing labels for node {self.node_name}")
        return self.node

    def sync(self, snapshot):
        """Apply a snapshot, logging (not raising) persistence failures."""
        try:
            self.synchronizer.apply(self.node, snapshot)
            return True
        except NodeStoreError as e:
            logger.error(f"[controller] Failed to save labels on {self.node_name}: {e}")
            return False

    async def bootstrap(self):
        try:
            snapshot = await asyncio.to_thread(self.source.fetch)
        except Exception as e:
            logger.error(f"[controller] Failed to get the initial instance data: {e}")
            return False
        logger.info(f"[controller] Initial instance data: {snapshot}")
        return self.sync(snapshot)

    def _handle(self, kind, item):
        if kind == "update":
            logger.info(f"[controller] Change to instance detected, new data: {item}")
            self.sync(item)
        else:
            logger.warning(f"[controller] Got error from instance watcher: {item}")

    async def steady_state(self, stop_event, watcher_task=None):
        getters = {
            "update": self.watcher.updates.get,
            "error": self.watcher.errors.get,
        }
        pending = {}
        stop_waiter = asyncio.ensure_future(stop_event.wait())
        waitables = [stop_waiter] + ([watcher_task] if watcher_task is not None else [])
        try:
            while not stop_event.is_set():
                for kind, get in getters.items():
                    if kind not in pending.values():
                        pending[asyncio.ensure_future(get())] = kind

                done, _ = await asyncio.wait(
                    list(pending) + waitables, return_when=asyncio.FIRST_COMPLETED
                )
                # handle every ready stream so neither starves the other
                for task in [t for t in done if t in pending]:
                    self._handle(pending.pop(task), task.result())

                if watcher_task is not None and watcher_task in done and not stop_event.is_set():
                    watcher_task.result()
                    logger.error("[controller] Instance watcher exited unexpectedly.")
                    break
        finally:
            for task in list(pending) + [stop_waiter]:
                task.cancel()

    async def run(self, stop_event=None):
        """
        Init, bootstrap, then watch until stop_event is set.

        In production stop_event is only set by SIGTERM/SIGINT, so this runs indefinitely.
        """
        stop_event = stop_event or asyncio.Event()
        if self.node is None:
            self.init()

        await self.bootstrap()

        watcher_task = asyncio.create_task(self.watcher.start(stop_event))
        try:
            await self.steady_state(stop_event, watcher_task)
        finally:
            stop_event.set()
            await watcher_task
            logger.info(
                f"[controller] Shutting down: {self.synchronizer.applied_total} label updates applied, "
                f"{self.synchronizer.failed_total} failed"
            )
