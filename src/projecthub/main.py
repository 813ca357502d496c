"""
main.py

Entry point for the projecthub API.

Wires the configured Unit of Work into the FastAPI app and starts uvicorn.
With DATABASE_URL set (e.g. ``sqlite:///projecthub.db``) the relational
store is used; otherwise everything lives in memory until the process exits.

Usage
-----
    # Option 1 — console script installed by pyproject.toml
    projecthub

    # Option 2 — run via uvicorn CLI (recommended for development)
    uvicorn projecthub.main:app --reload --port 8000

Once running, open your browser at:
    http://localhost:8000/docs      ← Swagger UI
    http://localhost:8000/health    ← liveness check

Quick-start walkthrough
-----------------------
1.  POST  /api/v1/employees                 — register a manager (role PROJECT_MANAGER)
                                              copy the returned "id"; it is your token
2.  POST  /api/v1/employees                 — register a team member
3.  POST  /api/v1/projects                  — create a project
                                              Authorization: Bearer <manager id>
4.  POST  /api/v1/projects/{id}/members     — add the team member
5.  POST  /api/v1/projects/{id}/sub-projects
6.  POST  /api/v1/sub-projects/{id}/tasks   — assign a task to the team member
7.  GET   /api/v1/sub-projects/{id}/tasks   — Authorization: Bearer <member id>
8.  PATCH /api/v1/tasks/{id}/status         — {"status": "In progress"}
"""

import uvicorn

from projecthub import config
from projecthub.api import app, get_uow
from projecthub.infrastructure import InMemoryUnitOfWork
from projecthub.logs import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Wire the concrete Unit of Work into the FastAPI dependency system.
# ---------------------------------------------------------------------------

if config.DATABASE_URL:
    from projecthub.sql_infrastructure import SqlAlchemyUnitOfWork, create_store

    engine = create_store(config.DATABASE_URL, echo=config.PROJECTHUB_DEBUG)
    app.dependency_overrides[get_uow] = lambda: SqlAlchemyUnitOfWork(engine)
else:
    logger.info("DATABASE_URL not set; using the in-memory store")
    app.dependency_overrides[get_uow] = lambda: InMemoryUnitOfWork()


def run():
    uvicorn.run(
        "projecthub.main:app",
        host=config.PROJECTHUB_HOST,
        port=config.PROJECTHUB_PORT,
        reload=config.PROJECTHUB_RELOAD,
        log_level="debug" if config.PROJECTHUB_DEBUG else "info",
    )


if __name__ == "__main__":
    run()
