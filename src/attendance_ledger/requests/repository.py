from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import CorrectionRequest


class RequestRepository(Protocol):
    def load_request(self, request_id: str) -> Optional[CorrectionRequest]:
        raise NotImplementedError

    def save_request(self, request: CorrectionRequest) -> None:
        raise NotImplementedError

    def delete_request(self, request_id: str) -> bool:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        user_id: Optional[str] = None,
        status: Optional[RequestStatus] = None,
        partner_name: Optional[str] = None,
        date: Optional[str] = None,
        month_year: Optional[str] = None,
    ) -> Sequence[CorrectionRequest]:
        """Newest first."""

        raise NotImplementedError
