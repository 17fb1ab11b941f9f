from __future__ import annotations

import logging
from typing import Optional, Protocol

from ..core.enums import BulkAction
from ..requests.model import CorrectionRequest

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify_request_decision(self, request: CorrectionRequest, action: BulkAction, remarks: Optional[str]) -> None:
        """Fire-and-forget; callers log failures and never propagate them."""

        raise NotImplementedError


class LoggingNotifier:
    """Default notifier: records the decision in the log instead of sending mail."""

    def notify_request_decision(self, request: CorrectionRequest, action: BulkAction, remarks: Optional[str]) -> None:
        logger.info(
            "request decision",
            extra={
                "request_id": request.request_id,
                "user_id": request.user_id,
                "date": request.date,
                "action": action.value,
                "requested_status": request.requested_status,
                "remarks": remarks,
            },
        )
