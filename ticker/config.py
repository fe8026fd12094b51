# ticker/config.py
from dotenv import load_dotenv, find_dotenv
import os
import logging

# Load nearest .env from project tree, don't override existing process env
load_dotenv(find_dotenv(usecwd=True), override=False)

logger = logging.getLogger(__name__)

DEFAULT_FEED_WS_URL = "ws://stream.tradingeconomics.com/?client=guest:guest"

class Settings:
    """Service configuration read from the environment."""

    # Live feed configuration
    FEED_ENABLED = os.getenv("FEED_ENABLED", "true").strip().lower() == "true"
    FEED_WS_URL = (os.getenv("FEED_WS_URL") or DEFAULT_FEED_WS_URL).strip()
    FEED_TOPIC = (os.getenv("FEED_TOPIC") or "EURUSD:CUR").strip()
    FEED_RETRY_DELAY_MS = int(os.getenv("FEED_RETRY_DELAY_MS", "1200"))  # Fixed reconnect delay

    # Login page behaviour
    RESET_DIALOG_CLOSE_MS = int(os.getenv("RESET_DIALOG_CLOSE_MS", "900"))
    TOAST_CLEAR_MS = int(os.getenv("TOAST_CLEAR_MS", "1600"))

    # HTTP server
    HOST = (os.getenv("HOST") or "0.0.0.0").strip()
    PORT = int(os.getenv("PORT", "8000"))

    # Logging
    LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    LOG_FILE = (os.getenv("LOG_FILE") or "").strip()

    def __init__(self):
        if not self.FEED_WS_URL.startswith(("ws://", "wss://")):
            logger.warning(f"FEED_WS_URL does not look like a WebSocket URL: {self.FEED_WS_URL}")

settings = Settings()
