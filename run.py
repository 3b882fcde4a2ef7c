#!/usr/bin/env python3
"""
Run the emergency leak service intake web server.
"""

import uvicorn

from utils.config import Config
from utils.logging import setup_logging


def main():
    """Start the web server."""
    config = Config.load()
    setup_logging(config.log_level)

    print(f"Starting emergency leak service intake on http://{config.host}:{config.port}")
    if not config.is_upstream_configured:
        print("Warning: SERVICE_INTAKE_API_URL / SERVICE_INTAKE_API_KEY not set")
    print("Press Ctrl+C to stop")

    uvicorn.run(
        "web.app:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
    )


if __name__ == "__main__":
    main()
