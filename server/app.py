"""
FastAPI application setup and configuration.
"""

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from server.middleware import RequestLoggingMiddleware


# =============================================================================
# Constants
# =============================================================================

DEFAULT_CORS_ORIGINS = "*"
API_TITLE = "Velocity Chat API"
API_DESCRIPTION = "Tool-using database assistant with streamed turns"
API_VERSION = "0.1.0"


# =============================================================================
# FastAPI App
# =============================================================================

app = FastAPI(title=API_TITLE, description=API_DESCRIPTION, version=API_VERSION)


# =============================================================================
# CORS Configuration
# =============================================================================

# Restrict in production, e.g. CORS_ORIGINS="https://app.example.com"
cors_origins_env = os.environ.get("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
cors_origins = [origin.strip() for origin in cors_origins_env.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=cors_origins != [DEFAULT_CORS_ORIGINS],
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

# Request logging middleware (added after CORS so it runs first)
app.add_middleware(RequestLoggingMiddleware)
