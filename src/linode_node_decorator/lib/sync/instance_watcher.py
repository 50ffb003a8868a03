"""
instance_watcher.py
- Polls a metadata source at a fixed interval and reports changes.
- Two bounded queues:
    - updates: a Snapshot each time the instance data differs from the last good fetch
    - errors: every fetch failure
- Failed fetches never touch the comparison baseline.
- On a full queue the oldest pending event is dropped so the polling loop never blocks.
"""

import asyncio

from loguru import logger

from linode_node_decorator.core.constants import DEFAULT_EVENT_BUFFER, DEFAULT_POLL_INTERVAL
from linode_node_decorator.core.errors import ConfigError, WatcherError


class InstanceWatcher:
    def __init__(self, source, interval=DEFAULT_POLL_INTERVAL, buffer_size=DEFAULT_EVENT_BUFFER):
        if interval is None or interval <= 0:
            raise ConfigError(f"watcher interval must be positive, got {interval!r}")
        if buffer_size <= 0:
            raise ConfigError(f"watcher buffer size must be positive, got {buffer_size!r}")

        self.source = source
        self.interval = interval
        self.updates = asyncio.Queue(maxsize=buffer_size)
        self.errors = asyncio.Queue(maxsize=buffer_size)

        self.last_snapshot = None
        self.dropped_total = 0
        self._started = False
        self._stopped = False

    @property
    def running(self):
        return self._started and not self._stopped

    def _push(self, queue, item, kind):
        if self._stopped:
            return
        if queue.full():
            queue.get_nowait()
            self.dropped_total += 1
            logger.warning(f"[watcher] {kind} queue full, dropped oldest pending event")
        queue.put_nowait(item)

    def observe(self, snapshot):
        """Compare a fresh snapshot against the baseline; returns True if it was emitted."""
        if snapshot == self.last_snapshot:
            logger.debug("[watcher] Instance data unchanged.")
            return False
        logger.info(f"[watcher] Instance change detected: {self.last_snapshot} -> {snapshot}")
        self.last_snapshot = snapshot
        self._push(self.updates, snapshot, "updates")
        return True

    async def poll_once(self, stop_event=None):
        """Run a single tick: fetch, then emit a change or an error."""
        try:
            snapshot = await asyncio.to_thread(self.source.fetch)
        except Exception as e:
            if stop_event is not None and stop_event.is_set():
                return
            logger.warning(f"[watcher] Fetch failed: {e}")
            self._push(self.errors, e, "errors")
            return

        if stop_event is not None and stop_event.is_set():
            logger.debug("[watcher] Stopped during fetch, discarding result.")
            return
        self.observe(snapshot)

    async def _wait(self, stop_event):
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=self.interval)
        except asyncio.TimeoutError:
            pass

    async def start(self, stop_event):
        """
        Poll until stop_event is set. The first tick runs immediately.

        A watcher can only be started once; create a new one to watch again.
        """
        if self._started:
            raise WatcherError("instance watcher cannot be restarted")
        self._started = True
        logger.info(f"[watcher] Watching instance metadata every {self.interval}s")

        try:
            while not stop_event.is_set():
                await self.poll_once(stop_event)
                if stop_event.is_set():
                    break
                await self._wait(stop_event)
        finally:
            self._stopped = True
            logger.info("[watcher] Stopped.")
