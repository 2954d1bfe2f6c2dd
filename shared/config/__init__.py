"""
Configuration management.
"""

from shared.config.logging import get_logger, job_log_context, setup_logging
from shared.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "setup_logging", "get_logger", "job_log_context"]
