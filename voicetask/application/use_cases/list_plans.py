from __future__ import annotations

from voicetask.application.ports.plan_catalog_port import PlanCatalogPort
from voicetask.domain.entities.plan import Plan


class ListPlansUseCase:
    def __init__(self, *, plan_catalog_port: PlanCatalogPort):
        self._plan_catalog_port = plan_catalog_port

    def execute(self) -> list[Plan]:
        return self._plan_catalog_port.list_active_plans()
