"""
Simulated password reset. Nothing is sent anywhere; the dialog only needs a
validation message or an acknowledgment.
"""

import logging
from typing import Optional

from ticker.config import settings
from ticker.errors import ValidationError
from ticker.schemas.reset import ResetOutcome

logger = logging.getLogger(__name__)

RESET_MISSING_FIELDS_MESSAGE = "Please enter your email or username to reset your password."
RESET_ACK_MESSAGE = "If an account exists for those details, a reset link will be sent shortly."


def submit_password_reset(email: Optional[str], username: Optional[str]) -> ResetOutcome:
    if not (email or "").strip() and not (username or "").strip():
        raise ValidationError(RESET_MISSING_FIELDS_MESSAGE, {"fields": ["email", "username"]})

    logger.info("[password_reset] Simulated reset request accepted")
    return ResetOutcome(message=RESET_ACK_MESSAGE, close_after_ms=settings.RESET_DIALOG_CLOSE_MS)
