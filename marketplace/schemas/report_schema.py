from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel


class ReportStatus(str, Enum):
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"
    UNKNOWN = "UNKNOWN"               # server sent a status this client does not know


class ReportAction(str, Enum):
    APPROVE = "APPROVE"
    DISMISS = "DISMISS"


class ReportView(BaseModel):
    id: Union[int, str]
    publication_id: Optional[Union[int, str]] = None
    reporter_name: Optional[str] = None
    reason: Optional[str] = None
    description: Optional[str] = None
    report_date: Optional[datetime] = None
    status: ReportStatus = ReportStatus.PENDING
    raw_status: Optional[str] = None
    admin_feedback: Optional[str] = None
    resolved_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != ReportStatus.PENDING


class ReportCreate(BaseModel):
    """Payload for POST /reports/create."""
    publication_id: Union[int, str]
    reason: str
    description: Optional[str] = None

    def to_payload(self) -> dict:
        return {
            "publicationId": self.publication_id,
            "reason": self.reason,
            "description": self.description,
        }
