import os

from dotenv import load_dotenv

load_dotenv()

# Relational store; empty means the in-memory store is used
DATABASE_URL = os.getenv("DATABASE_URL", "")

# CORS settings
CORS_ALLOW_ORIGINS = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:8000,http://127.0.0.1:8000").split(",")

# Uvicorn server settings
PROJECTHUB_HOST = os.getenv("PROJECTHUB_HOST", "127.0.0.1")
PROJECTHUB_PORT = int(os.getenv("PROJECTHUB_PORT", "8000"))
PROJECTHUB_RELOAD = os.getenv("PROJECTHUB_RELOAD", "").lower() in ("1", "true", "yes")

# Logging
PROJECTHUB_LOG_LEVEL = os.getenv("PROJECTHUB_LOG_LEVEL", "")
PROJECTHUB_DEBUG = os.getenv("PROJECTHUB_DEBUG", "").lower() in ("1", "true", "yes")
PROJECTHUB_LOG_DIR = os.getenv("PROJECTHUB_LOG_DIR", "")
