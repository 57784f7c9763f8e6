"""Main entry point for the geiger display pipeline.

Wires an inbound link (serial dongle or MQTT topic) to the ingest queue,
runs the aggregation engine on its own thread and renders every snapshot
on the configured presentation sink.
"""

import logging
import signal
import sys
import threading
from typing import Optional

from .config import Config, ConfigError
from .ingest import IngestQueue, ReadingReceiver
from .link import LinkError, SerialLink
from .models import DisplayConfig, MQTTConfig
from .mqtt import MQTTClient, MQTTClientError, MQTTPublisher, MQTTSubscriber
from .presentation import ChartDisplaySink, ConsoleSink, PresentationSink
from .processing import AggregationEngine

# Set by SIGINT/SIGTERM to stop the link and the engine
shutdown_event = threading.Event()


def signal_handler(signum, frame):
    """Handle shutdown signals gracefully."""
    logger = logging.getLogger(__name__)
    logger.info(f"Received signal {signum}, initiating shutdown...")
    shutdown_event.set()


def setup_logging(config: Config) -> None:
    """Configure logging based on config settings."""
    logging_config = config.get_logging_config()

    level_name = logging_config.get("level", "INFO")
    level = getattr(logging, level_name.upper(), logging.INFO)

    log_format = logging_config.get(
        "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    logging.basicConfig(level=level, format=log_format)


def build_sink(
    display_config: DisplayConfig,
    mqtt_client: Optional[MQTTClient],
    mqtt_config: MQTTConfig,
) -> PresentationSink:
    """
    Create the configured presentation sink.

    Args:
        display_config: Display configuration
        mqtt_client: Connected MQTT client (required for the 'mqtt' sink)
        mqtt_config: MQTT configuration

    Returns:
        Presentation sink
    """
    if display_config.sink == "mqtt":
        if mqtt_client is None:
            raise ValueError("The 'mqtt' sink requires a connected MQTT client")
        return MQTTPublisher(mqtt_client=mqtt_client, config=mqtt_config)
    if display_config.sink == "chart":
        return ChartDisplaySink(
            chart_points=display_config.chart_points,
            initial_range_max=display_config.initial_range_max,
        )
    return ConsoleSink()


def run_pipeline(config: Config) -> int:
    """
    Run the pipeline until a shutdown signal arrives.

    Args:
        config: Application configuration

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    logger = logging.getLogger(__name__)

    link_config = config.get_link_config()
    engine_config = config.get_engine_config()
    display_config = config.get_display_config()
    mqtt_config = config.get_mqtt_config()
    uses_mqtt = link_config.type == "mqtt" or display_config.sink == "mqtt"

    logger.info("=" * 70)
    logger.info("Starting geiger display pipeline")
    logger.info("=" * 70)
    if link_config.type == "serial":
        logger.info(f"Link: serial {link_config.port} @ {link_config.baudrate} baud")
    else:
        logger.info(f"Link: MQTT {mqtt_config.get_topic(mqtt_config.input_subtopic)}")
    if uses_mqtt:
        logger.info(f"MQTT: {mqtt_config.broker}:{mqtt_config.port}")
    logger.info(f"Sink: {display_config.sink}")
    logger.info(
        f"Window: {engine_config.window_size} readings, "
        f"queue: {engine_config.queue_capacity} slots"
    )
    logger.info("=" * 70)

    ingest_queue = IngestQueue(capacity=engine_config.queue_capacity)
    receiver = ReadingReceiver(ingest_queue)

    mqtt_client: Optional[MQTTClient] = None
    publisher: Optional[MQTTPublisher] = None
    link: Optional[SerialLink] = None
    consumer: Optional[threading.Thread] = None

    try:
        if uses_mqtt:
            mqtt_client = MQTTClient(mqtt_config)
            mqtt_client.connect()

        sink = build_sink(display_config, mqtt_client, mqtt_config)
        if isinstance(sink, MQTTPublisher):
            publisher = sink
            publisher.startup()

        engine = AggregationEngine(
            ingest_queue=ingest_queue,
            sink=sink,
            window_size=engine_config.window_size,
            conversion_factor=engine_config.conversion_factor,
            yield_seconds=engine_config.yield_seconds,
        )

        consumer = threading.Thread(
            target=engine.run,
            args=(shutdown_event,),
            name="aggregation-engine",
            daemon=True,
        )
        consumer.start()

        logger.info("=" * 70)
        logger.info("Pipeline started successfully. Press Ctrl+C to stop.")
        logger.info("=" * 70)

        if link_config.type == "serial":
            link = SerialLink(link_config, receiver)
            link.connect()
            link.run(shutdown_event)
        else:
            MQTTSubscriber(mqtt_client, mqtt_config, receiver).start()
            while not shutdown_event.wait(1.0):
                pass

        logger.info("Shutdown requested, cleaning up...")

    except KeyboardInterrupt:
        logger.info("Interrupted by user (Ctrl+C)")

    except (LinkError, MQTTClientError) as e:
        logger.error(f"Link error: {e}")
        return 1

    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1

    finally:
        logger.info("Performing shutdown sequence...")
        shutdown_event.set()

        if consumer:
            consumer.join(timeout=5.0)

        if link:
            try:
                link.disconnect()
            except Exception as e:
                logger.error(f"Error closing serial link: {e}")

        if publisher:
            try:
                publisher.shutdown()
            except Exception as e:
                logger.error(f"Error during publisher shutdown: {e}")

        if mqtt_client:
            try:
                mqtt_client.disconnect()
            except Exception as e:
                logger.error(f"Error disconnecting MQTT: {e}")

        logger.info("=" * 70)
        logger.info(f"Shutdown complete. Receiver: {receiver.get_stats()}")
        logger.info(f"Queue: {ingest_queue.get_stats()}")
        logger.info("=" * 70)

    return 0


def main() -> int:
    """Main application entry point."""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        config_path = sys.argv[1] if len(sys.argv) > 1 else None
        config = Config(config_path)

        setup_logging(config)

        return run_pipeline(config)

    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
