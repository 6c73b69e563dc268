"""Entry point: wires all components and starts the gRPC server."""

from __future__ import annotations

import logging
import signal
import sys
from concurrent import futures

import grpc

import config
from moodinsights.insight_store import InsightStore
from moodinsights.repository import KeyValueMoodRepository
from moodinsights.service import InsightsServicer, add_insights_servicer_to_server
from moodinsights.storage import JsonFileKeyValueStore, KeyValueStore
from moodinsights.synthesizer import InsightSynthesizer

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_synthesizer(store: KeyValueStore) -> InsightSynthesizer:
    """Wire the repository, insight store and synthesizer over one substrate.

    Args:
        store: The key-value substrate holding mood data and insights.

    Returns:
        An :class:`~moodinsights.synthesizer.InsightSynthesizer` with the
        default detector catalogue.
    """
    return InsightSynthesizer(
        repository=KeyValueMoodRepository(store),
        insight_store=InsightStore(store),
    )


def build_server(synthesizer: InsightSynthesizer) -> grpc.Server:
    """Construct and configure the gRPC server with all dependencies wired.

    Args:
        synthesizer: The configured synthesizer.

    Returns:
        A configured but not-yet-started :class:`grpc.Server`.
    """
    servicer = InsightsServicer(synthesizer=synthesizer)

    server = grpc.server(
        futures.ThreadPoolExecutor(max_workers=config.GRPC_MAX_WORKERS)
    )
    add_insights_servicer_to_server(servicer, server)
    server.add_insecure_port(
        f"{config.GRPC_SERVER_HOST}:{config.GRPC_SERVER_PORT}"
    )
    return server


def main() -> None:
    """Initialise all components and start the gRPC server.

    Startup sequence:
    1. Open the JSON key-value store.
    2. Wire the synthesizer and build the gRPC server.
    3. Register ``SIGTERM``/``SIGINT`` shutdown handlers.
    4. Start serving.
    """
    logger.info("Opening store at %s", config.INSIGHTS_STORE_PATH)
    store = JsonFileKeyValueStore(config.INSIGHTS_STORE_PATH)

    synthesizer = build_synthesizer(store)
    server = build_server(synthesizer)

    def handle_shutdown(signum: int, frame: object) -> None:
        sig_name = signal.Signals(signum).name
        logger.info("Received %s, shutting down…", sig_name)
        server.stop(grace=5)
        sys.exit(0)

    signal.signal(signal.SIGTERM, handle_shutdown)
    signal.signal(signal.SIGINT, handle_shutdown)

    server.start()
    logger.info(
        "Insights gRPC server listening on %s:%d",
        config.GRPC_SERVER_HOST,
        config.GRPC_SERVER_PORT,
    )
    server.wait_for_termination()


if __name__ == "__main__":
    main()
