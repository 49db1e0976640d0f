"""Logging configuration for the WakaTime client."""

import logging
from pathlib import Path

DEFAULT_CONFIG_DIR = Path.home() / ".wakatime-client"


def setup_logging(log_level: int = logging.INFO, config_dir: Path | None = None) -> None:
    """Configure logging for the command-line application.

    Args:
        log_level: Logging level (e.g., logging.INFO, logging.DEBUG).
        config_dir: Directory to store log files. Defaults to ~/.wakatime-client/
    """
    if config_dir is None:
        config_dir = DEFAULT_CONFIG_DIR

    config_dir.mkdir(parents=True, exist_ok=True)
    log_file = config_dir / "wakatime-client.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(log_level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(file_handler)

    # Console only shows warnings unless verbose
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level if log_level <= logging.DEBUG else logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s - %(message)s"))
    root_logger.addHandler(console_handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
