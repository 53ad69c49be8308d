"""FastAPI main application for the 99 game backend"""

import logging
import os

from .ws.server import create_app

# Configure logging
logging.basicConfig(level=getattr(logging, os.getenv("LOG_LEVEL", "info").upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
