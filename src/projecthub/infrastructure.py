"""
infrastructure.py

In-memory implementation of all repository interfaces and the Unit of Work.

This is a self-contained backend that stores everything in plain Python
dicts keyed by auto-incrementing integer ids.  It is intentionally simple,
suitable for local development, demos, and tests without needing a real
database.  The relational implementation of the same interfaces lives in
sql_infrastructure.py; main.py picks one based on DATABASE_URL.

Objects are copied on the way in and out, so a caller mutating a loaded
entity changes nothing until it calls ``update()``, the same as with a
real database.
"""

from __future__ import annotations

import copy
import itertools
from typing import List, Tuple

from projecthub.application import (
    AbstractEmployeeRepository,
    AbstractProjectRepository,
    AbstractSubProjectRepository,
    AbstractSubTaskRepository,
    AbstractTaskRepository,
    AbstractUnitOfWork,
)


# ---------------------------------------------------------------------------
# Generic in-memory store
# ---------------------------------------------------------------------------

class _Store(dict):
    """A plain dict with id assignment and copying get/save/delete helpers."""

    def __init__(self):
        super().__init__()
        self._ids = itertools.count(1)

    def insert(self, obj) -> int:
        obj.id = next(self._ids)
        self[obj.id] = copy.deepcopy(obj)
        return obj.id

    def fetch(self, key: int):
        obj = self.get(key)
        return copy.deepcopy(obj) if obj is not None else None

    def replace(self, obj) -> bool:
        if obj.id not in self:
            return False
        self[obj.id] = copy.deepcopy(obj)
        return True

    def remove(self, key: int) -> bool:
        return self.pop(key, None) is not None

    def all(self) -> list:
        return [copy.deepcopy(v) for v in self.values()]


# ---------------------------------------------------------------------------
# Shared in-memory database (module-level singleton)
# Persists for the lifetime of the process; restarting uvicorn resets it.
# ---------------------------------------------------------------------------

class InMemoryDatabase:
    def __init__(self):
        self.employees:    _Store = _Store()
        self.projects:     _Store = _Store()
        self.sub_projects: _Store = _Store()
        self.tasks:        _Store = _Store()
        self.sub_tasks:    _Store = _Store()
        # (project_id, employee_id) pairs, in the order they were added
        self.project_employee: List[Tuple[int, int]] = []

    # Cascading deletes shared by the repositories below

    def delete_sub_task(self, sub_task_id: int) -> bool:
        return self.sub_tasks.remove(sub_task_id)

    def delete_task(self, task_id: int) -> bool:
        if task_id not in self.tasks:
            return False
        for st_id in [k for k, st in self.sub_tasks.items() if st.task_id == task_id]:
            self.delete_sub_task(st_id)
        return self.tasks.remove(task_id)

    def delete_sub_project(self, sub_project_id: int) -> bool:
        if sub_project_id not in self.sub_projects:
            return False
        for t_id in [k for k, t in self.tasks.items() if t.sub_project_id == sub_project_id]:
            self.delete_task(t_id)
        return self.sub_projects.remove(sub_project_id)

    def delete_project(self, project_id: int) -> bool:
        if project_id not in self.projects:
            return False
        for sp_id in [k for k, sp in self.sub_projects.items() if sp.project_id == project_id]:
            self.delete_sub_project(sp_id)
        self.project_employee = [pe for pe in self.project_employee if pe[0] != project_id]
        return self.projects.remove(project_id)


# Module-level singleton, shared across all requests
_db = InMemoryDatabase()


# ---------------------------------------------------------------------------
# Repository implementations
# ---------------------------------------------------------------------------

class InMemoryEmployeeRepository(AbstractEmployeeRepository):
    def __init__(self, db: InMemoryDatabase): self._db = db; self._s = db.employees
    def add(self, employee):          return self._s.insert(employee)
    def get(self, employee_id):       return self._s.fetch(employee_id)
    def get_by_username(self, username):
        return next((e for e in self._s.all() if e.username == username), None)
    def list_all(self):               return self._s.all()
    def list_by_role(self, role):
        return [e for e in self._s.all() if e.role == role]

    def validate_login(self, username, password):
        match = next(
            (e for e in self._s.values() if e.username == username and e.password == password),
            None,
        )
        return match.id if match else 0


class InMemoryProjectRepository(AbstractProjectRepository):
    def __init__(self, db: InMemoryDatabase): self._db = db; self._s = db.projects
    def add(self, project):           return self._s.insert(project)
    def get(self, project_id):        return self._s.fetch(project_id)
    def update(self, project):        return self._s.replace(project)
    def delete(self, project_id):     return self._db.delete_project(project_id)

    def list_for_employee(self, employee_id):
        ids = [p for p, e in self._db.project_employee if e == employee_id]
        return [p for p in self._s.all() if p.id in ids]

    def add_member(self, employee_id, project_id):
        if (project_id, employee_id) not in self._db.project_employee:
            self._db.project_employee.append((project_id, employee_id))

    def member_ids(self, project_id):
        return [e for p, e in self._db.project_employee if p == project_id]

    def list_members(self, project_id):
        ids = self.member_ids(project_id)
        return [e for e in self._db.employees.all() if e.id in ids]

    def list_available(self, project_id):
        ids = self.member_ids(project_id)
        return [e for e in self._db.employees.all() if e.id not in ids]


class InMemorySubProjectRepository(AbstractSubProjectRepository):
    def __init__(self, db: InMemoryDatabase): self._db = db; self._s = db.sub_projects
    def add(self, sub_project):       return self._s.insert(sub_project)
    def get(self, sub_project_id):    return self._s.fetch(sub_project_id)
    def update(self, sub_project):    return self._s.replace(sub_project)
    def delete(self, sub_project_id): return self._db.delete_sub_project(sub_project_id)
    def list_for_project(self, project_id):
        return [sp for sp in self._s.all() if sp.project_id == project_id]


class InMemoryTaskRepository(AbstractTaskRepository):
    def __init__(self, db: InMemoryDatabase): self._db = db; self._s = db.tasks
    def add(self, task):              return self._s.insert(task)
    def get(self, task_id):           return self._s.fetch(task_id)
    def update(self, task):           return self._s.replace(task)
    def delete(self, task_id):        return self._db.delete_task(task_id)
    def list_for_sub_project(self, sub_project_id):
        return [t for t in self._s.all() if t.sub_project_id == sub_project_id]
    def list_for_employee(self, employee_id):
        return [t for t in self._s.all() if t.employee_id == employee_id]


class InMemorySubTaskRepository(AbstractSubTaskRepository):
    def __init__(self, db: InMemoryDatabase): self._db = db; self._s = db.sub_tasks
    def add(self, sub_task):          return self._s.insert(sub_task)
    def get(self, sub_task_id):       return self._s.fetch(sub_task_id)
    def update(self, sub_task):       return self._s.replace(sub_task)
    def delete(self, sub_task_id):    return self._db.delete_sub_task(sub_task_id)
    def list_for_task(self, task_id):
        return [st for st in self._s.all() if st.task_id == task_id]


# ---------------------------------------------------------------------------
# Unit of Work
# ---------------------------------------------------------------------------

class InMemoryUnitOfWork(AbstractUnitOfWork):
    """
    Wraps all in-memory repositories.  commit() and rollback() are no-ops
    because dict mutations are immediate and there is no transaction to manage.
    """

    def __init__(self, db: InMemoryDatabase = _db):
        self.employees    = InMemoryEmployeeRepository(db)
        self.projects     = InMemoryProjectRepository(db)
        self.sub_projects = InMemorySubProjectRepository(db)
        self.tasks        = InMemoryTaskRepository(db)
        self.sub_tasks    = InMemorySubTaskRepository(db)

    def commit(self)   -> None: pass   # no-op for in-memory
    def rollback(self) -> None: pass   # no-op for in-memory
