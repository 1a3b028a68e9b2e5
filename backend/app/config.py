"""
Application configuration read from environment variables.

Every setting has a default that works for local development against
SQLite, so the backend and the web frontend start without a .env file.
"""

import os

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./students.db")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# CORS - comma separated list of origins allowed to call the API
ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]

# Client / web frontend
API_URL = os.getenv("API_URL", "http://localhost:8000")
CLIENT_CACHE_TTL_SECONDS = float(os.getenv("CLIENT_CACHE_TTL_SECONDS", "30"))
CLIENT_TIMEOUT_SECONDS = float(os.getenv("CLIENT_TIMEOUT_SECONDS", "10"))

SERVICE_NAME = "Student Management API"
SERVICE_VERSION = "1.0.0"
