from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .attendance.aggregator import MonthlyAggregator
from .attendance.classifier import DailyClassifier
from .attendance.factory import ValueStrategyFactory
from .attendance.service import AttendanceService
from .common.datetime_utils import Clock, SystemClock
from .common.locks import KeyedLocks
from .core.constants import DEFAULT_IN_TIME, DEFAULT_MONTHLY_EARNED, DEFAULT_OUT_TIME
from .core.exceptions import ValidationError
from .database.connection import DBConfig, DatabaseConnection
from .leave.service import LeaveLedger
from .notifications.notifier import LoggingNotifier, Notifier
from .requests.bulk import BulkCoordinator
from .requests.service import RequestService
from .schedules.model import ScheduleTime
from .schedules.resolver import ScheduleResolver
from .store.memory import InMemoryStore
from .store.mysql_store import MySQLStore

Store = Union[InMemoryStore, MySQLStore]


@dataclass(frozen=True)
class Container:
    store: Store
    clock: Clock
    locks: KeyedLocks

    resolver: ScheduleResolver
    classifier: DailyClassifier
    aggregator: MonthlyAggregator

    leave_ledger: LeaveLedger
    request_service: RequestService
    bulk_coordinator: BulkCoordinator
    attendance_service: AttendanceService


def _build_store(store_backend: str, db_config: Optional[dict]) -> Store:
    backend = (store_backend or "memory").lower()
    if backend == "memory":
        return InMemoryStore()
    if backend == "mysql":
        if not db_config:
            raise ValidationError("DB_CONFIG is required for the mysql store", field="DB_CONFIG")
        return MySQLStore(DatabaseConnection.get_instance(DBConfig.from_dict(db_config)))
    raise ValidationError(f"Unknown store backend {store_backend!r}", field="STORE_BACKEND")


def build_container(
    *,
    store_backend: str = "memory",
    db_config: Optional[dict] = None,
    store: Optional[Store] = None,
    clock: Optional[Clock] = None,
    notifier: Optional[Notifier] = None,
    default_in_time: str = DEFAULT_IN_TIME,
    default_out_time: str = DEFAULT_OUT_TIME,
    monthly_leave_accrual: float = DEFAULT_MONTHLY_EARNED,
    bulk_max_workers: int = 1,
) -> Container:
    store = store if store is not None else _build_store(store_backend, db_config)
    clock = clock or SystemClock()
    locks = KeyedLocks()

    resolver = ScheduleResolver(default=ScheduleTime.of(default_in_time, default_out_time))
    classifier = DailyClassifier(resolver=resolver, strategies=ValueStrategyFactory())
    aggregator = MonthlyAggregator(resolver=resolver)

    leave_ledger = LeaveLedger(
        store, store, store, clock=clock, monthly_earned=monthly_leave_accrual, locks=locks
    )
    request_service = RequestService(
        store,
        store,
        store,
        leave_ledger,
        classifier=classifier,
        aggregator=aggregator,
        notifier=notifier or LoggingNotifier(),
        clock=clock,
        locks=locks,
    )
    bulk_coordinator = BulkCoordinator(request_service, max_workers=bulk_max_workers)
    attendance_service = AttendanceService(
        store,
        store,
        store,
        leave_ledger,
        classifier=classifier,
        aggregator=aggregator,
        locks=locks,
    )

    return Container(
        store=store,
        clock=clock,
        locks=locks,
        resolver=resolver,
        classifier=classifier,
        aggregator=aggregator,
        leave_ledger=leave_ledger,
        request_service=request_service,
        bulk_coordinator=bulk_coordinator,
        attendance_service=attendance_service,
    )
