"""projecthub: projects, sub-projects, tasks and sub-tasks with role-based access."""

__version__ = "1.0.0"
