# ============================================================================
# shared/logging.py - Logging configuration
# ============================================================================

import logging
from pathlib import Path
from config import LOG_LEVEL

def setup_logging(log_dir: str = "logs") -> None:
    """Configure application logging"""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Create logs directory if it doesn't exist
    log_path = Path(log_dir)
    log_path.mkdir(exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper()),
        format=log_format,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_path / "snr-manager.log")
        ]
    )

    # AXL traffic and provisioning outcomes also get their own files
    for app_name in ["axl", "snr"]:
        app_logger = logging.getLogger(f"apps.{app_name}")
        log_file = (log_path / f"{app_name}.log").resolve()
        if any(getattr(h, "baseFilename", None) == str(log_file) for h in app_logger.handlers):
            continue
        app_handler = logging.FileHandler(log_file)
        app_handler.setFormatter(logging.Formatter(log_format))
        app_logger.addHandler(app_handler)
