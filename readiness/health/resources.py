"""Process memory and OS load sampling for health reports."""

import logging
from typing import Callable

import psutil

from readiness.domain import ResourceSample

logger = logging.getLogger(__name__)

BYTES_PER_MEGABYTE = 1024 * 1024


def health_sample_resources(process: psutil.Process | None = None) -> ResourceSample:
    """Capture process memory and the one-minute OS load average.

    Metrics the platform cannot provide are returned as None; a missing metric
    never fails the sample.

    Args:
        process: Process to inspect; the current process when omitted.

    Returns:
        ResourceSample: RSS and heap in MB (one decimal), load in two decimals.
    """

    target_process = process if process is not None else psutil.Process()
    memory_info = _health_read_metric("memory_info", target_process.memory_info)
    rss_mb = _health_round(getattr(memory_info, "rss", None), 1, BYTES_PER_MEGABYTE)
    # `data` (text + data segment) is only reported on Linux and BSD.
    heap_mb = _health_round(getattr(memory_info, "data", None), 1, BYTES_PER_MEGABYTE)
    load_average = _health_read_metric("getloadavg", psutil.getloadavg)
    load1 = _health_round(load_average[0] if load_average else None, 2)
    return ResourceSample(rss_mb=rss_mb, heap_mb=heap_mb, load1=load1)


def _health_read_metric(metric_name: str, reader: Callable[[], object]):
    try:
        return reader()
    except (psutil.Error, OSError, AttributeError, NotImplementedError) as error:
        logger.debug("Resource metric %s unavailable: %s", metric_name, error)
        return None


def _health_round(value: float | None, digits: int, divisor: int = 1) -> float | None:
    if value is None:
        return None
    return round(value / divisor, digits)
