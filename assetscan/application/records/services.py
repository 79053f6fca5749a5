"""Process-wide wiring of the store, catalog client and busy flag."""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx

from assetscan.application.records.commit import CommitPipeline
from assetscan.runtime import Settings, load_settings
from assetscan.runtime.busy import BusyFlag
from assetscan.runtime.catalog_client import CatalogClient
from assetscan.runtime.record_store import RecordStore


@dataclass
class RecordServices:
    """Collaborators shared by every record workflow in one process.

    The busy flag lives here so the commit pipeline, the synchronizer and
    history deletion all contend for the same slot.
    """

    settings: Settings
    store: RecordStore
    catalog: CatalogClient
    busy: BusyFlag = field(default_factory=BusyFlag)

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> RecordServices:
        settings = settings or load_settings()
        return cls(
            settings=settings,
            store=RecordStore.from_settings(settings),
            catalog=CatalogClient(settings, client=http_client),
        )

    def pipeline(self) -> CommitPipeline:
        return CommitPipeline(self.store, self.catalog, self.settings, busy=self.busy)

    async def aclose(self) -> None:
        await self.catalog.aclose()
