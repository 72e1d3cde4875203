"""Command-line entry point for the query result normalizer."""
import argparse
import json
import logging
import sys

import structlog

from promconv.api import ConversionAPI
from promconv.config import Config, load_config
from promconv.engine import NormalizerEngine


def build_log_formatter(log_format: str) -> logging.Formatter:
    """Formatter for stdlib log records; JSON output goes through structlog."""
    if log_format == "json":
        return structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
            ],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
        )

    return logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def setup_logging(log_level: str, log_format: str):
    """Setup logging configuration."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(build_log_formatter(log_format))

    logging.basicConfig(level=level, handlers=[handler])

    # Reduce noise from some libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def read_payload(path: str):
    """Read a JSON query response from a file, or stdin for '-'."""
    if path == "-":
        return json.load(sys.stdin)
    with open(path, 'r') as f:
        return json.load(f)


def format_observations(engine: NormalizerEngine, observations, output: str, template=None) -> str:
    """Render observations as JSON, plain text lines or through a template."""
    if template is not None:
        return "\n".join(engine.render_observation(template, obs) for obs in observations)

    if output == "json":
        return json.dumps([obs.to_dict() for obs in observations], indent=2)

    return "\n".join(
        f"{obs.key} {obs.readable_value()} {obs.timestamp}" for obs in observations
    )


def main(argv=None):
    """Main function."""
    parser = argparse.ArgumentParser(
        description="Query Result Normalizer - Flatten metrics query results into observations"
    )
    parser.add_argument(
        "--config",
        "-c",
        help="Path to configuration YAML file"
    )
    parser.add_argument(
        "--input",
        "-i",
        default="-",
        help="Query response JSON file ('-' for stdin)"
    )
    parser.add_argument(
        "--output",
        "-o",
        choices=["json", "text"],
        default="json",
        help="Output format"
    )
    parser.add_argument(
        "--template",
        "-t",
        help="Template rendered once per observation"
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP API instead of converting a single response"
    )

    args = parser.parse_args(argv)

    # Load configuration
    try:
        config = load_config(args.config) if args.config else Config()
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(config.global_.log_level, config.global_.log_format)
    logger = logging.getLogger(__name__)

    engine = NormalizerEngine(config)

    if args.serve:
        if not config.api.enabled:
            logger.error("API is disabled in configuration")
            return 1
        logger.info(f"Starting API on {config.api.bind_address}:{config.api.port}")
        ConversionAPI(engine).run(host=config.api.bind_address, port=config.api.port)
        return 0

    try:
        payload = read_payload(args.input)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read query response: {e}")
        return 1

    result_type, observations = engine.normalize(payload)
    logger.info(f"Result type {result_type}: {len(observations)} observations")

    text = format_observations(engine, observations, args.output, args.template)
    if text:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
