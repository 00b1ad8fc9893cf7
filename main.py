"""
Serve the Revenue Pulse analytics API with uvicorn.

Run: python main.py
Env: DASHBOARD_HOST (0.0.0.0), DASHBOARD_PORT (5001), DATA_DIR, DEBUG=true for reload.
"""

import os

from dotenv import load_dotenv

load_dotenv()

from scripts.lib.logger import setup_logger  # noqa: E402

logger = setup_logger("revenue-pulse")

HOST = os.getenv("DASHBOARD_HOST", "0.0.0.0")
PORT = int(os.getenv("DASHBOARD_PORT", "5001"))
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

if __name__ == "__main__":
    import uvicorn

    logger.info(
        "Revenue Pulse on http://%s:%d (data: %s, docs: /docs, reload: %s)",
        HOST, PORT, os.getenv("DATA_DIR", "./data"), DEBUG,
    )
    uvicorn.run("dashboard.api.main:app", host=HOST, port=PORT, reload=DEBUG)
