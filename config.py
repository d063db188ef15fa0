"""
Configuration module for the Schedule Board bot

This module centralizes all configuration constants, environment variables,
and file paths used throughout the bot.
"""

import os
from dataclasses import dataclass
from typing import List
from dotenv import load_dotenv

# ============================================================================
# ENVIRONMENT SETUP
# ============================================================================

# Load environment variables from .env file (use absolute path for hosting)
SCRIPT_DIR = os.path.dirname(os.path.realpath(__file__))
_ENV_FILE = os.path.join(SCRIPT_DIR, '.env')

load_dotenv(_ENV_FILE)

# ============================================================================
# FILE PATHS
# ============================================================================

DATA_DIR = os.path.join(SCRIPT_DIR, "data_cache")
PROPERTIES_FILE = os.getenv('PROPERTIES_FILE', os.path.join(DATA_DIR, "properties.json"))

# Error + event logging
LOGS_DIR = os.path.join(SCRIPT_DIR, "logs")

os.makedirs(DATA_DIR, exist_ok=True)
os.makedirs(LOGS_DIR, exist_ok=True)

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def parse_int_list(env_var: str, default: list = None) -> list:
    """Parse comma-separated list of integers from environment variable"""
    value = os.getenv(env_var, "")
    if not value:
        return default or []
    try:
        return [int(x.strip()) for x in value.split(",") if x.strip()]
    except ValueError:
        return default or []


def parse_int(env_var: str, default: int = 0) -> int:
    """Parse a single integer from environment variable"""
    try:
        return int(os.getenv(env_var, str(default)))
    except ValueError:
        return default


# ============================================================================
# BOT CONFIGURATION
# ============================================================================

@dataclass
class BotConfig:
    """Bot configuration constants"""
    SERVICE_ACCOUNT_FILE: str = 'credentials.json'
    GOOGLE_SHEET_ID: str = None
    DISCORD_BOT_TOKEN: str = None
    RELAY_BASE_URL: str = 'https://discord.com/api/v10'
    ADMIN_ROLE_IDS: List[int] = None
    SCHEDULE_CHANNEL_ID: int = 0   # where captains post
    BOARD_CHANNEL_ID: int = 0      # where the board lives (defaults to schedule channel)
    LOGGING_CHANNEL_ID: int = 0    # operational notices
    DEBUG_LOG_CHANNEL_ID: int = 0  # infrastructure failures
    POLL_INTERVAL_MINUTES: int = 5
    POLL_MAX_MESSAGES: int = 200
    POLL_MAX_SECONDS: int = 240
    POLL_PAGE_SIZE: int = 50
    RELAY_TIMEOUT: int = 15  # seconds
    MAX_RETRIES: int = 3
    RETRY_DELAY: int = 1  # seconds

    def __post_init__(self):
        # Load from environment variables for security
        self.SERVICE_ACCOUNT_FILE = os.getenv('SERVICE_ACCOUNT_FILE', self.SERVICE_ACCOUNT_FILE)
        self.GOOGLE_SHEET_ID = os.getenv('GOOGLE_SHEET_ID', '')  # Must be set in .env
        self.DISCORD_BOT_TOKEN = os.getenv('DISCORD_BOT_TOKEN', '')
        self.RELAY_BASE_URL = os.getenv('RELAY_BASE_URL', self.RELAY_BASE_URL).rstrip('/')
        self.ADMIN_ROLE_IDS = parse_int_list('ADMIN_ROLE_IDS')

        self.SCHEDULE_CHANNEL_ID = parse_int('SCHEDULE_CHANNEL_ID')
        # The board is republished to the channel captains post in unless overridden
        self.BOARD_CHANNEL_ID = parse_int('BOARD_CHANNEL_ID') or self.SCHEDULE_CHANNEL_ID
        self.LOGGING_CHANNEL_ID = parse_int('LOGGING_CHANNEL_ID')
        self.DEBUG_LOG_CHANNEL_ID = parse_int('DEBUG_LOG_CHANNEL_ID') or self.LOGGING_CHANNEL_ID

        self.POLL_INTERVAL_MINUTES = parse_int('POLL_INTERVAL_MINUTES', self.POLL_INTERVAL_MINUTES)
        self.POLL_MAX_MESSAGES = parse_int('POLL_MAX_MESSAGES', self.POLL_MAX_MESSAGES)
        self.POLL_MAX_SECONDS = parse_int('POLL_MAX_SECONDS', self.POLL_MAX_SECONDS)


config = BotConfig()

# ============================================================================
# LEAGUE STRUCTURE
# ============================================================================

# Divisions in rank order (rematch sections sort by this)
DIVISIONS = ["Bronze", "Silver", "Gold"]
DIVISION_RANK = {name: rank for rank, name in enumerate(DIVISIONS)}

BYE_MARKER = "BYE"

# Canonical map ids look like dod_anzio_b4
MAP_PREFIX = "dod_"

# ============================================================================
# TIME
# ============================================================================

TIMEZONE = "America/New_York"
TIMEZONE_LABEL = "ET"
DEFAULT_KICKOFF_HOUR = 21  # 9 PM
DEFAULT_KICKOFF_MINUTE = 0

# ============================================================================
# SPREADSHEET LAYOUT
# ============================================================================

TEAMS_SHEET_NAME = 'Teams'      # Division | Team
ALIASES_SHEET_NAME = 'Aliases'  # Alias | Team
MAPS_SHEET_NAME = 'Maps'        # Map

# Each division has its own grid worksheet named after the division.
# A block is one header row (Week N | map | date) followed by up to
# ROWS_PER_BLOCK match rows
# (W/L | home | score | score | away | W/L) and a spacer row.
GRID_START_ROW = 2      # 1-indexed row of the first block header
ROWS_PER_BLOCK = 8
GRID_COLUMNS = 6

# ============================================================================
# BOARD
# ============================================================================

MAX_MESSAGE_LENGTH = 2000
BOARD_COLORS = {
    "created": 0x2ECC71,
    "edited": 0x3498DB,
    "deleted": 0xE67E22,
    "up-to-date": 0x808080,
    "error": 0xE74C3C,
}
