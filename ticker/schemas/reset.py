"""
Password reset dialog schemas.
"""

from typing import Optional

from pydantic import BaseModel


class ResetRequest(BaseModel):
    """Reset dialog form fields (either may be left blank)."""
    email: Optional[str] = None
    username: Optional[str] = None


class ResetOutcome(BaseModel):
    """Acknowledgment shown in the dialog before it closes itself."""
    message: str
    close_after_ms: int
