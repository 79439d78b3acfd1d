"""
c4c_odata.api - Optional REST API Gateway
==========================================

FastAPI gateway for building OData query strings and running queries
over HTTP.

Usage
-----
>>> from c4c_odata.api import create_app
>>> app = create_app()
>>> # Run with: uvicorn c4c_odata.api:app

Or run directly:
>>> python -m c4c_odata.api

"""

from pathlib import Path

from dotenv import load_dotenv

# Load .env before the gateway reads its configuration
env_path = Path.cwd() / ".env"
if env_path.exists():
    load_dotenv(env_path)

from c4c_odata.api.gateway import ODataGateway, build_filter, build_params, create_app

# Default app instance for uvicorn
app = create_app()

__all__ = [
    "create_app",
    "build_filter",
    "build_params",
    "ODataGateway",
    "app",
]
