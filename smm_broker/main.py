from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request

from smm_broker import __version__
from smm_broker.core.container import ApplicationContainer, build_container
from smm_broker.core.logging import configure_logging
from smm_broker.infrastructure.database.session import init_db
from smm_broker.schemas import HealthResponse, TickReportSchema


def create_app(container: Optional[ApplicationContainer] = None) -> FastAPI:
    container = container or build_container()
    settings = container.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        await init_db(container.engine)
        await container.monitor.initialize()
        if settings.jobs.enabled:
            container.start_jobs()
        try:
            yield
        finally:
            await container.aclose()

    app = FastAPI(
        title=settings.project_name,
        description="SMM order brokering engine",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request) -> HealthResponse:
        current: ApplicationContainer = request.app.state.container
        report = current.monitor.last_report
        return HealthResponse(
            version=__version__,
            environment=current.settings.environment,
            pending_orders=len(current.monitor.pending),
            jobs_running=[job.name for job in current.jobs if job.running],
            last_tick=TickReportSchema.model_validate(report) if report else None,
        )

    return app


def run() -> None:
    uvicorn.run("smm_broker.main:create_app", factory=True, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
