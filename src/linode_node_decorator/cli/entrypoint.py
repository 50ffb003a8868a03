"""
entrypoint.py
- Process bootstrap for the node decorator agent.
- Parses flags, resolves settings, configures logging, builds the metadata client
  and node store, then hands off to the Controller.
- Any startup failure exits with status 1; after startup the agent runs until SIGTERM/SIGINT.
"""

import argparse
import asyncio
import signal
import sys

from loguru import logger

from linode_node_decorator import __version__
from linode_node_decorator.core.config import load_settings
from linode_node_decorator.core.constants import SUPPORTED_BACKENDS
from linode_node_decorator.core.errors import NodeDecoratorError
from linode_node_decorator.core.logging_setup import configure_logging
from linode_node_decorator.lib.metadata.linode_client import LinodeMetadataClient
from linode_node_decorator.lib.nodes import make_node_store
from linode_node_decorator.runner.controller import Controller


def build_parser():
    parser = argparse.ArgumentParser(
        prog="linode-node-decorator",
        description="Keep cluster node labels in sync with Linode instance metadata.",
    )
    parser.add_argument("--poll-interval", type=int, default=None,
                        help="The interval (in seconds) to poll and update node information (default 60)")
    parser.add_argument("--node-name", default=None, help="Name of this node in the cluster (default $NODE_NAME)")
    parser.add_argument("--backend", choices=SUPPORTED_BACKENDS, default=None,
                        help="Cluster the node belongs to (default kubernetes)")
    parser.add_argument("--config", default=None, help="Optional YAML settings file")
    parser.add_argument("--dry-run", action="store_true", help="Log label changes without saving them")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_controller(settings):
    source = LinodeMetadataClient(
        base_url=settings.metadata_base_url,
        token_expiry=settings.token_expiry,
        timeout=settings.metadata_timeout,
    )
    store = make_node_store(settings.backend)
    controller = Controller(
        settings.node_name,
        store,
        source,
        interval=settings.poll_interval,
        dry_run=settings.dry_run,
    )
    controller.init()
    return controller


async def serve(controller):
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, stop_event.set)
    await controller.run(stop_event)


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(debug=args.debug)

    try:
        settings = load_settings(args)
        configure_logging(debug=settings.debug, sentry_dsn=settings.sentry_dsn)
        logger.info(f"Starting Linode Node Decorator: version {__version__}")
        logger.info(f"The poll interval is set to {settings.poll_interval} seconds")
        if settings.dry_run:
            logger.warning("[startup] Dry run enabled, labels will not be saved.")
        controller = build_controller(settings)
    except NodeDecoratorError as e:
        logger.critical(f"[startup] {e}")
        return 1

    asyncio.run(serve(controller))
    return 0


if __name__ == "__main__":
    sys.exit(main())
