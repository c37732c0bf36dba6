"""
FastAPI Server Startup Script
Run this to start the Invoice Dashboard server
"""

import logging

import uvicorn
from dotenv import load_dotenv

from invoice_dashboard.config import get_settings

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def main():
    """Start the FastAPI server"""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    logger.info("Starting %s on http://%s:%s", settings.app_name, settings.api_host, settings.api_port)
    logger.info("API Documentation: http://%s:%s/api/docs", settings.api_host, settings.api_port)
    logger.info("Health Check: http://%s:%s/api/health", settings.api_host, settings.api_port)

    uvicorn.run(
        "invoice_dashboard.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
        access_log=True
    )


if __name__ == "__main__":
    main()
