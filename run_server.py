"""
Meeting Scheduler API Runner
Usage: python run_server.py
"""

import logging
import sys
from pathlib import Path

import uvicorn

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from meeting_scheduler.config import ENVIRONMENT, PORT

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logger.info(f"🚀 Starting Meeting Scheduler API on port {PORT} ({ENVIRONMENT})")
    try:
        uvicorn.run(
            "meeting_scheduler.main:app",
            host="0.0.0.0",  # noqa: S104
            port=PORT,
            reload=ENVIRONMENT == "development",
        )
    except KeyboardInterrupt:
        logger.info("👋 Server stopped by user")
