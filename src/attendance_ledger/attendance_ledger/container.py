from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
from zoneinfo import ZoneInfo

from .audit.auditor import TenantConsistencyAuditor
from .common.datetime_utils import get_zone
from .core.constants import DEFAULT_BATCH_CAPACITY, DEFAULT_LOOKBACK_MONTHS
from .core.enums import StoreBackend
from .core.exceptions import ValidationError
from .directory.loader import DirectorySnapshotLoader
from .directory.memory_directory_repository import InMemoryDirectoryRepository
from .directory.repository import DirectoryRepository
from .ledger.memory_ledger_repository import InMemoryLedgerStore
from .ledger.repository import LedgerStore
from .manual.mark import MarkService
from .manual.purge import PurgeService
from .manual.seed import SeedService
from .reconciliation.service import ReconciliationService


@dataclass(frozen=True)
class Container:
    tz: ZoneInfo
    batch_capacity: int

    ledger_store: LedgerStore
    directory_repo: DirectoryRepository
    directory_loader: DirectorySnapshotLoader

    reconciliation_service: ReconciliationService
    tenant_auditor: TenantConsistencyAuditor
    seed_service: SeedService
    purge_service: PurgeService
    mark_service: MarkService


def _build_stores(backend: StoreBackend, settings: Any) -> tuple[LedgerStore, DirectoryRepository]:
    if backend == StoreBackend.MYSQL:
        from .database.connection import DatabaseConnection, DBConfig
        from .directory.mysql_directory_repository import MySQLDirectoryRepository
        from .ledger.mysql_ledger_repository import MySQLLedgerRepository

        conn = DatabaseConnection(DBConfig.from_mapping(getattr(settings, "DB_CONFIG")))
        return MySQLLedgerRepository(conn), MySQLDirectoryRepository(conn)

    if backend == StoreBackend.FIRESTORE:
        from .directory.firestore_directory_repository import FirestoreDirectoryRepository
        from .firebase.client import init_firestore
        from .ledger.firestore_ledger_repository import FirestoreLedgerRepository

        client = init_firestore(
            project_id=getattr(settings, "FIREBASE_PROJECT_ID", None),
            service_account_json=getattr(settings, "FIREBASE_SERVICE_ACCOUNT", None),
            credentials_path=getattr(settings, "FIREBASE_CREDENTIALS_PATH", None),
        )
        return FirestoreLedgerRepository(client), FirestoreDirectoryRepository(client)

    return InMemoryLedgerStore(), InMemoryDirectoryRepository()


def build_container(
    *,
    ledger_store: LedgerStore,
    directory_repo: DirectoryRepository,
    timezone: Optional[str] = None,
    batch_capacity: int = DEFAULT_BATCH_CAPACITY,
    lookback_months: int = DEFAULT_LOOKBACK_MONTHS,
) -> Container:
    """Wire every service around one store client pair."""

    tz = get_zone(timezone)
    loader = DirectorySnapshotLoader(directory_repo)

    return Container(
        tz=tz,
        batch_capacity=int(batch_capacity),
        ledger_store=ledger_store,
        directory_repo=directory_repo,
        directory_loader=loader,
        reconciliation_service=ReconciliationService(
            ledger_store,
            loader,
            tz=tz,
            batch_capacity=batch_capacity,
            lookback_months=lookback_months,
        ),
        tenant_auditor=TenantConsistencyAuditor(ledger_store, loader, tz=tz),
        seed_service=SeedService(ledger_store, tz=tz, batch_capacity=batch_capacity),
        purge_service=PurgeService(ledger_store, tz=tz, batch_capacity=batch_capacity),
        mark_service=MarkService(ledger_store, loader, tz=tz, batch_capacity=batch_capacity),
    )


def build_container_from_settings(settings: Any) -> Container:
    raw_backend = str(getattr(settings, "STORE_BACKEND", StoreBackend.MYSQL.value)).lower()
    try:
        backend = StoreBackend(raw_backend)
    except ValueError as exc:
        raise ValidationError(f"Unknown STORE_BACKEND {raw_backend!r}") from exc

    ledger_store, directory_repo = _build_stores(backend, settings)

    return build_container(
        ledger_store=ledger_store,
        directory_repo=directory_repo,
        timezone=getattr(settings, "TIMEZONE", None),
        batch_capacity=int(getattr(settings, "BATCH_CAPACITY", DEFAULT_BATCH_CAPACITY)),
        lookback_months=int(getattr(settings, "LOOKBACK_MONTHS", DEFAULT_LOOKBACK_MONTHS)),
    )
