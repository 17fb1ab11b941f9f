from __future__ import annotations

import logging
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence, Union

from ..common.validators import optional_text
from ..core.constants import BULK_APPROVE_REMARK, BULK_REJECT_REMARK
from ..core.enums import ApproverRole, BulkAction
from ..core.exceptions import AlreadyProcessedError, DomainError, NotFoundError, ValidationError
from .service import RequestService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UniformMode:
    """Same value and remark for every selected request."""

    value: Optional[float] = None
    remark: Optional[str] = None


@dataclass(frozen=True)
class ItemDecision:
    value: Optional[float] = None
    remark: Optional[str] = None


@dataclass(frozen=True)
class PerItemMode:
    items: Mapping[str, ItemDecision] = field(default_factory=dict)


BulkMode = Union[UniformMode, PerItemMode]


@dataclass(frozen=True)
class BulkItemError:
    request_id: str
    error: str


@dataclass
class BulkResult:
    success_count: int = 0
    skipped: list[str] = field(default_factory=list)
    errors: list[BulkItemError] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success_count": self.success_count,
            "skipped": list(self.skipped),
            "errors": [{"request_id": e.request_id, "error": e.error} for e in self.errors],
        }


def _as_action(value) -> BulkAction:
    if isinstance(value, BulkAction):
        return value
    try:
        return BulkAction(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown bulk action {value!r}", field="action") from None


class BulkCoordinator:
    """Applies approve/reject to many requests, one independent unit of work each.

    Requests of different users may run in parallel (``max_workers`` > 1);
    requests of the same user always run in submission order on one thread.
    """

    def __init__(self, service: RequestService, *, max_workers: int = 1):
        self._service = service
        self._max_workers = max(1, int(max_workers))

    def bulk_apply(
        self,
        action,
        request_ids: Sequence[str],
        mode: Optional[BulkMode] = None,
        *,
        approver_role=ApproverRole.PARTNER,
    ) -> BulkResult:
        action = _as_action(action)
        mode = mode or UniformMode()
        ids = list(OrderedDict.fromkeys(str(i) for i in request_ids))

        result = BulkResult()
        outcomes: dict[str, tuple[str, Optional[str]]] = {}

        groups: "OrderedDict[str, list[str]]" = OrderedDict()
        for request_id in ids:
            try:
                owner = self._service.get_request(request_id).user_id
            except NotFoundError as exc:
                outcomes[request_id] = ("error", str(exc))
                continue
            groups.setdefault(owner, []).append(request_id)

        def run_group(group: list[str]) -> list[tuple[str, str, Optional[str]]]:
            return [(rid, *self._apply_one(action, rid, mode, approver_role)) for rid in group]

        if self._max_workers == 1 or len(groups) <= 1:
            batches = [run_group(g) for g in groups.values()]
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                batches = list(pool.map(run_group, groups.values()))

        for batch in batches:
            for rid, kind, message in batch:
                outcomes[rid] = (kind, message)

        for rid in ids:
            kind, message = outcomes[rid]
            if kind == "ok":
                result.success_count += 1
            elif kind == "skipped":
                result.skipped.append(rid)
            else:
                result.errors.append(BulkItemError(request_id=rid, error=message or ""))

        logger.info(
            "bulk action finished",
            extra={
                "action": action.value,
                "requested": len(ids),
                "success_count": result.success_count,
                "skipped_count": len(result.skipped),
                "error_count": len(result.errors),
            },
        )
        return result

    def _decision_for(self, action: BulkAction, request_id: str, mode: BulkMode) -> ItemDecision:
        default_remark = BULK_APPROVE_REMARK if action is BulkAction.APPROVE else BULK_REJECT_REMARK
        if isinstance(mode, PerItemMode):
            item = mode.items.get(request_id) or ItemDecision()
            return ItemDecision(value=item.value, remark=optional_text(item.remark) or default_remark)
        return ItemDecision(value=mode.value, remark=optional_text(mode.remark) or default_remark)

    def _apply_one(self, action: BulkAction, request_id: str, mode: BulkMode, role) -> tuple[str, Optional[str]]:
        try:
            if self._service.get_request(request_id).status.is_terminal:
                return "skipped", None
            decision = self._decision_for(action, request_id, mode)
            if action is BulkAction.APPROVE:
                self._service.approve(request_id, role, decision.remark, decision.value)
            else:
                self._service.reject(request_id, role, decision.remark)
            return "ok", None
        except AlreadyProcessedError:
            # decided by someone else between the check and the transition
            return "skipped", None
        except DomainError as exc:
            logger.warning("bulk item failed", extra={"request_id": request_id, "error": str(exc)})
            return "error", str(exc)
        except Exception as exc:
            logger.exception("bulk item crashed", extra={"request_id": request_id})
            return "error", str(exc)
