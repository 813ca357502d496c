"""Pytest fixtures for projecthub."""
from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from projecthub.api import app, get_uow
from projecthub.application import (
    AddEmployeeToProjectCommand,
    AddEmployeeToProjectUseCase,
    CreateEmployeeCommand,
    CreateEmployeeUseCase,
    CreateProjectCommand,
    CreateProjectUseCase,
)
from projecthub.infrastructure import InMemoryDatabase, InMemoryUnitOfWork
from projecthub.sql_infrastructure import SqlAlchemyUnitOfWork, create_store


@pytest.fixture()
def sql_engine(tmp_path):
    engine = create_store(f"sqlite:///{tmp_path / 'projecthub.db'}")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture(params=["memory", "sqlite"])
def uow(request, tmp_path):
    """A fresh, empty Unit of Work for each backing store."""
    if request.param == "memory":
        yield InMemoryUnitOfWork(InMemoryDatabase())
        return
    engine = create_store(f"sqlite:///{tmp_path / 'projecthub.db'}")
    try:
        yield SqlAlchemyUnitOfWork(engine)
    finally:
        engine.dispose()


def register(uow, username, role="TEAM_MEMBER", skill="DEVELOPER", password="secret"):
    cmd = CreateEmployeeCommand(
        username=username,
        password=password,
        email=f"{username}@acme.io",
        role=role,
        skill=skill,
    )
    return CreateEmployeeUseCase().execute(cmd, uow)


@pytest.fixture()
def manager(uow):
    return register(uow, "anna", role="PROJECT_MANAGER", skill="PROJECT_MANAGER")


@pytest.fixture()
def member(uow):
    return register(uow, "ben")


@pytest.fixture()
def outsider(uow):
    """A team member who is not on any project."""
    return register(uow, "carl", skill="TESTER")


@pytest.fixture()
def project(uow, manager, member):
    """Project 2025-01-01 → 2025-01-10 with the manager and ``member`` on it."""
    cmd = CreateProjectCommand(
        name="Webshop",
        description="New storefront",
        customer="Acme",
        start_date=date(2025, 1, 1),
        deadline=date(2025, 1, 10),
        acting_employee_id=manager.id,
    )
    created = CreateProjectUseCase().execute(cmd, uow)
    AddEmployeeToProjectUseCase().execute(
        AddEmployeeToProjectCommand(
            project_id=created.id, employee_id=member.id, acting_employee_id=manager.id
        ),
        uow,
    )
    return created


@pytest.fixture()
def client():
    db = InMemoryDatabase()
    app.dependency_overrides[get_uow] = lambda: InMemoryUnitOfWork(db)
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
