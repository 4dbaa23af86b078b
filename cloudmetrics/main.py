"""Command-line tool for sending a single metric to Cloud Monitoring."""
import argparse
import logging
import sys
from typing import Dict, List, Optional, Union

from cloudmetrics.config import Config, load_config
from cloudmetrics.exporter import CloudMonitoringExporter
from cloudmetrics.self_metrics import SelfMetrics


def setup_logging(log_level: str, log_format: str):
    """Setup logging configuration."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    if log_format == "json":
        # A real JSON formatter would need python-json-logger; same as text for now
        fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    else:
        fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

    logging.basicConfig(
        level=level,
        format=fmt,
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Reduce noise from some libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("google.auth").setLevel(logging.WARNING)


def parse_value(raw: str) -> Union[int, float, bool, str]:
    """Interpret a command-line value as int, float, bool or string."""
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        pass
    if raw.lower() in ("true", "false"):
        return raw.lower() == "true"
    return raw


def parse_labels(pairs: List[str]) -> Dict[str, str]:
    labels = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Label must be key=value, got '{pair}'")
        k, v = pair.split("=", 1)
        labels[k] = v
    return labels


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Send one custom metric point to Google Cloud Monitoring"
    )
    parser.add_argument("--metric", "-m", required=True, help="Metric name without the custom.googleapis.com/ prefix")
    parser.add_argument("--value", "-v", help="Value to record; a counter increment of 1 when omitted")
    parser.add_argument("--label", "-l", action="append", default=[], help="Label as key=value, repeatable")
    parser.add_argument("--config", "-c", help="Path to configuration YAML file")
    parser.add_argument("--timeout", type=float, help="Deadline in seconds for the write call")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config else Config()
        labels = dict(config.emitter.default_labels)
        labels.update(parse_labels(args.label))
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(config.global_.log_level, config.global_.log_format)
    logger = logging.getLogger(__name__)

    self_metrics = SelfMetrics(prefix=config.self_metrics.prefix)

    exporter = CloudMonitoringExporter(
        self_metrics=self_metrics,
        timeout=args.timeout if args.timeout is not None else config.emitter.timeout_s
    )

    if args.value is None:
        ok = exporter.push_counter(args.metric, labels)
    else:
        ok = exporter.push_metric(args.metric, parse_value(args.value), labels)

    outcome = {
        name: self_metrics.sample(name, args.metric)
        for name in ("points_written_total", "write_errors_total", "rejected_values_total", "build_errors_total")
    }
    outcome["skipped_disabled_total"] = self_metrics.sample("skipped_disabled_total")
    logger.debug(f"Emission outcome: {outcome}")

    if ok:
        logger.info(f"Metric {args.metric} written")
        return 0
    logger.warning(f"Metric {args.metric} was not written, see log above")
    return 1


if __name__ == "__main__":
    sys.exit(main())
