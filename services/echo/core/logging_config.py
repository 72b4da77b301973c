import os

from services.common.core.logging_config import setup_logging as common_setup_logging


def setup_logging(config_path: str = "", log_level: str = "INFO"):
    """
    Load the YAML config and initialize logging.
    LOG_CONFIG_PATH in the environment wins over the configured path.
    """
    path = os.getenv("LOG_CONFIG_PATH") or config_path or "config/echo_log.yaml"
    common_setup_logging(path, log_level=log_level)
