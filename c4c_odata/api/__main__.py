"""
c4c_odata.api - Run as module

Usage: python -m c4c_odata.api
"""

import logging
import os

import uvicorn

logger = logging.getLogger("c4c_odata.api")


def main():
    """Run the API gateway server."""
    host = os.environ.get("ODATA_HOST", "0.0.0.0")
    port = int(os.environ.get("ODATA_PORT", "5050"))
    reload = os.environ.get("ODATA_RELOAD", "false").lower() == "true"
    log_level = os.environ.get("ODATA_LOG_LEVEL", "info")

    logging.basicConfig(level=log_level.upper())
    logger.info(f"Starting C4C OData Gateway on {host}:{port}")

    uvicorn.run(
        "c4c_odata.api:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


if __name__ == "__main__":
    main()
