"""Health layer package for resource sampling, report building and readiness checks."""

from .interfaces import HealthServicePort
from .report import health_aggregate_status, health_build_report
from .resources import health_sample_resources
from .service import (
    DIRECT_TARGET_KIND,
    POOLER_TARGET_KIND,
    ReadinessConfig,
    ReadinessHealthService,
    health_config_from_settings,
    health_metadata_from_settings,
)

__all__ = [
    "DIRECT_TARGET_KIND",
    "POOLER_TARGET_KIND",
    "HealthServicePort",
    "ReadinessConfig",
    "ReadinessHealthService",
    "health_aggregate_status",
    "health_build_report",
    "health_config_from_settings",
    "health_metadata_from_settings",
    "health_sample_resources",
]
