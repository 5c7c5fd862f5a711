"""Pydantic schemas exposed by the service host."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class TickReportSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    monitored: int
    batches: int
    updated: int
    settled: int
    errors: int
    rejected: int
    failed: bool = False
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    environment: str
    pending_orders: int
    jobs_running: list[str]
    last_tick: Optional[TickReportSchema] = None
