"""
Utility helpers used by the migration tool.

This subpackage exposes convenience functions for structured logging,
error codes, id map reports and pre-flight checks.
"""

from .errors import ERRORS, MenuMigrationError, UnsupportedItemTypeError, log_message, report_error, report_ok
from .id_map import generate_id_map_csv
from .pre_flight_checks import PreFlightCheckError, run_wordpress_pre_flight_checks

__all__ = [
    "ERRORS",
    "MenuMigrationError",
    "PreFlightCheckError",
    "UnsupportedItemTypeError",
    "generate_id_map_csv",
    "log_message",
    "report_error",
    "report_ok",
    "run_wordpress_pre_flight_checks",
]
