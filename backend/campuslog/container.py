"""
CampusLog Backend — Service Container
=======================================

What:  Builds every backend client and domain service once, at startup.
Why:   Services receive their collaborators explicitly; there are no
       module-level API clients. Tests build a container from a SQL store and
       a local blob store and pass it to create_app().
How:   build_container(settings) picks the backends named in the settings,
       then ServiceContainer.from_stores() wires the six domain services.
Who:   main.py stores the container on app.state; routes/deps.py reads it.

Domain Locations:
    buslog, generatorlog and filelog each have a spreadsheet and an upload
    folder. The directory tables share one spreadsheet and upload nothing.
    With the SQL backend an unset spreadsheet id falls back to the domain
    name, so a fresh checkout runs without any ids configured.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from campuslog.config import Settings
from campuslog.database import build_engine, build_session_factory, init_models
from campuslog.services.blob_base import BlobStore
from campuslog.services.directory_service import (
    DepartmentService,
    EmployeeService,
    StudentService,
)
from campuslog.services.event_log_service import GeneratorLogService, TripLogService
from campuslog.services.file_movement_service import FileMovementService
from campuslog.services.table_base import Table, TableStore, utc_timestamp

logger = logging.getLogger(__name__)

UPLOAD_DOMAINS = ("buslog", "generatorlog", "filelog")
DOMAINS = UPLOAD_DOMAINS + ("directory",)


@dataclass
class ServiceContainer:
    """Everything a request handler can reach."""

    store: TableStore
    locations: Dict[str, str]
    trip_log: TripLogService
    generator_log: GeneratorLogService
    file_log: FileMovementService
    departments: DepartmentService
    employees: EmployeeService
    students: StudentService
    engine: Optional[AsyncEngine] = field(default=None)

    @classmethod
    def from_stores(
        cls,
        store: TableStore,
        blob_stores: Dict[str, BlobStore],
        locations: Dict[str, str],
        clock: Callable[[], str] = utc_timestamp,
        max_attachment_size: Optional[int] = None,
        engine: Optional[AsyncEngine] = None,
    ) -> "ServiceContainer":
        directory = locations["directory"]
        return cls(
            store=store,
            locations=dict(locations),
            trip_log=TripLogService(
                store, blob_stores["buslog"], locations["buslog"],
                clock=clock, max_attachment_size=max_attachment_size,
            ),
            generator_log=GeneratorLogService(
                store, blob_stores["generatorlog"], locations["generatorlog"],
                clock=clock, max_attachment_size=max_attachment_size,
            ),
            file_log=FileMovementService(
                store, blob_stores["filelog"], locations["filelog"], clock=clock
            ),
            departments=DepartmentService(store, directory, clock=clock),
            employees=EmployeeService(store, directory, clock=clock),
            students=StudentService(store, directory, clock=clock),
            engine=engine,
        )

    @property
    def tables(self) -> List[Table]:
        """Every table the services write to."""
        return [
            self.trip_log.table,
            self.generator_log.table,
            self.file_log.files,
            self.file_log.movements,
            self.departments.table,
            self.employees.table,
            self.students.table,
        ]

    async def ensure_headers(self) -> None:
        for table in self.tables:
            await self.store.ensure_header(table)

    async def health(self) -> Dict[str, bool]:
        """Reachability of each distinct spreadsheet location."""
        results: Dict[str, bool] = {}
        for domain, location in self.locations.items():
            results[domain] = await self.store.health_check(location)
        return results

    async def aclose(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Database engine disposed")


def _locations(settings: Settings) -> Dict[str, str]:
    locations = {
        domain: getattr(settings, f"{domain}_spreadsheet_id") for domain in DOMAINS
    }
    if settings.store_backend == "database":
        locations = {domain: location or domain for domain, location in locations.items()}
    return locations


async def build_container(settings: Settings) -> ServiceContainer:
    """
    Construct the backends selected by `settings` and wire the services.

    Raises:
        ValueError: the settings lack an id or credentials a backend needs
    """
    settings.validate_required_for_production()

    credentials = None
    sheets = drive = None
    http_factory = None
    if settings.store_backend == "sheets" or settings.blob_backend == "drive":
        from campuslog.google_clients import (
            authorized_http_factory,
            build_google_resources,
            load_credentials,
        )

        credentials = load_credentials(settings)
        sheets, drive = build_google_resources(credentials)
        http_factory = authorized_http_factory(credentials)

    engine: Optional[AsyncEngine] = None
    if settings.store_backend == "database":
        from campuslog.services.sql_table_store import SqlTableStore

        engine = build_engine(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
        )
        if settings.database_auto_create:
            await init_models(engine)
        store: TableStore = SqlTableStore(build_session_factory(engine))
    else:
        from campuslog.services.sheets_table_store import SheetsTableStore

        store = SheetsTableStore(sheets, http_factory=http_factory)

    blob_stores: Dict[str, BlobStore] = {}
    for domain in UPLOAD_DOMAINS:
        if settings.blob_backend == "drive":
            from campuslog.services.drive_blob_store import DriveBlobStore

            blob_stores[domain] = DriveBlobStore(
                drive, getattr(settings, f"{domain}_folder_id"), http_factory=http_factory
            )
        else:
            from campuslog.services.local_blob_store import LocalBlobStore

            blob_stores[domain] = LocalBlobStore(
                settings.storage_root, domain, settings.public_base_url
            )

    container = ServiceContainer.from_stores(
        store,
        blob_stores,
        _locations(settings),
        max_attachment_size=settings.max_file_size,
        engine=engine,
    )
    logger.info(
        "Services ready (store=%s, blobs=%s)", settings.store_backend, settings.blob_backend
    )

    if settings.bootstrap_headers:
        await container.ensure_headers()
    return container
