"""
Google Sheets connection for the schedule spreadsheet.

Provides:
- GoogleSheetsManager: Connection and retry logic for Google Sheets API
- Lazy singleton access via get_gs_manager()
"""

import time
import random
import gspread
from gspread.exceptions import WorksheetNotFound

# Import from local modules
from config import config, DIVISIONS, TEAMS_SHEET_NAME, ALIASES_SHEET_NAME, MAPS_SHEET_NAME
from utils.error_handling import log_error, is_retryable_error


# ============================================================================
# GOOGLE SHEETS MANAGER
# ============================================================================

class GoogleSheetsManager:
    """Manages Google Sheets connection with retry logic

    Features:
    - Automatic connection establishment
    - Retry logic with exponential backoff
    - Schedule worksheet verification
    - Async timeout protection
    """

    def __init__(self, connect: bool = True):
        """Initialize Google Sheets connection"""
        self.gc = None
        self.sh = None
        self.connected = False
        if connect:
            self._connect()

    def _connect(self):
        """Establish connection to Google Sheets"""
        try:
            self.gc = gspread.service_account(filename=config.SERVICE_ACCOUNT_FILE)
            self.sh = self.gc.open_by_key(config.GOOGLE_SHEET_ID)
            self.connected = True
            print("Bot: Connected to Google Sheets.")
            self._verify_schedule_sheets()
        except Exception as e:
            log_error(e, "Google Sheets connection", {"sheet_id": config.GOOGLE_SHEET_ID})
            if is_retryable_error(e):
                print(f"--- BOT WARNING: COULD NOT CONNECT TO GSHEETS: {e} ---")
                print("--- Will retry on the next batch... ---")
            else:
                print(f"--- BOT CRITICAL ERROR (NON-NETWORK): {e} ---")
                raise

    def _verify_schedule_sheets(self):
        """Warn about roster/grid worksheets the board cannot work without"""
        titles = {ws.title for ws in self.sh.worksheets()}
        expected = [TEAMS_SHEET_NAME, ALIASES_SHEET_NAME, MAPS_SHEET_NAME] + DIVISIONS
        missing = [name for name in expected if name not in titles]
        if missing:
            print(f"ERROR (Bot): schedule worksheets not found: {', '.join(missing)}")

    def get_worksheet_with_retry(self, sheet_name: str, max_retries: int = None) -> list:
        """Get worksheet data with retry logic

        Args:
            sheet_name: Name of the worksheet to fetch
            max_retries: Maximum number of retry attempts

        Returns:
            List of all values from worksheet ([] if the worksheet is missing)
        """
        max_retries = max_retries or 5

        for attempt in range(max_retries):
            try:
                ws = self.sh.worksheet(sheet_name)
                return ws.get_all_values()
            except WorksheetNotFound:
                print(f"ERROR (Bot): '{sheet_name}' sheet not found.")
                return []
            except Exception as e:
                log_error(e, "Google Sheets worksheet", {"sheet_name": sheet_name, "attempt": attempt + 1})
                if is_retryable_error(e):
                    if attempt + 1 == max_retries:
                        print(f"❌ FATAL: All {max_retries} retries failed for sheet '{sheet_name}'.")
                        raise

                    # Exponential backoff with jitter
                    base_wait = config.RETRY_DELAY * (2 ** attempt)
                    jitter = random.uniform(0, 0.5)
                    wait_time = base_wait + jitter

                    print(f"⚠️ Attempt {attempt + 1}/{max_retries}: Network error getting '{sheet_name}'")
                    print(f"   Error: {str(e)[:100]}")
                    print(f"   ⏳ Retrying in {wait_time:.1f}s...")
                    time.sleep(wait_time)
                else:
                    print(f"❌ GSheet Read Error (non-retryable) for '{sheet_name}': {e}")
                    raise
        return []


# ============================================================================
# LAZY INITIALIZATION
# ============================================================================

_gs_manager_instance = None


def get_gs_manager():
    """Get or create singleton GoogleSheetsManager instance (lazy initialization)"""
    global _gs_manager_instance
    if _gs_manager_instance is None:
        _gs_manager_instance = GoogleSheetsManager()
    return _gs_manager_instance
