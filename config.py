# ============================================================================
# config.py - Environment driven settings
# ============================================================================

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Application settings
APP_NAME = "SNR Manager"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Single Number Reach provisioning for Unified CM over AXL"

# AXL (administrative API) connection
AXL_SERVER = os.getenv("AXL_SERVER", "")
AXL_USERNAME = os.getenv("AXL_USERNAME", "")
AXL_PASSWORD = os.getenv("AXL_PASSWORD", "")
AXL_VERSION = os.getenv("AXL_VERSION", "12.5")
AXL_VERIFY_TLS = os.getenv("AXL_VERIFY_TLS", "false").lower() == "true"
AXL_TIMEOUT = float(os.getenv("AXL_TIMEOUT", 30))
# 0 disables retries; only connect/timeout failures are retried
AXL_MAX_RETRIES = int(os.getenv("AXL_MAX_RETRIES", 0))

# Phone/line search
PHONE_SEARCH_MAX_RESULTS = int(os.getenv("PHONE_SEARCH_MAX_RESULTS", 25))

# Single Number Reach naming and defaults
SNR_PROFILE_PREFIX = os.getenv("SNR_PROFILE_PREFIX", "RDP_Teams_")
SNR_DESTINATION_SUFFIX = os.getenv("SNR_DESTINATION_SUFFIX", "test")
SNR_DEVICE_POOL = os.getenv("SNR_DEVICE_POOL", "Default")
SNR_CSS = os.getenv("SNR_CSS", "")
SNR_REROUTE_CSS = os.getenv("SNR_REROUTE_CSS", "")
SNR_MOBILITY_CSS = os.getenv("SNR_MOBILITY_CSS", "")
SNR_MAX_DESK_PICKUP_WAIT_TIME = int(os.getenv("SNR_MAX_DESK_PICKUP_WAIT_TIME", 10000))
SNR_REMOTE_DESTINATION_LIMIT = int(os.getenv("SNR_REMOTE_DESTINATION_LIMIT", 4))
SNR_ANSWER_TOO_SOON_TIMER = int(os.getenv("SNR_ANSWER_TOO_SOON_TIMER", 1500))
SNR_ANSWER_TOO_LATE_TIMER = int(os.getenv("SNR_ANSWER_TOO_LATE_TIMER", 19000))
SNR_DELAY_BEFORE_RINGING_CELL = int(os.getenv("SNR_DELAY_BEFORE_RINGING_CELL", 4000))

# Database configuration (provisioning run history)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./snr_manager.db")
DATABASE_ECHO = os.getenv("DATABASE_ECHO", "false").lower() == "true"

# API basic auth
API_USERNAME = os.getenv("API_USERNAME", "admin")
API_PASSWORD = os.getenv("API_PASSWORD", "change-me")

# Server settings
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "info")

# CORS settings
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
