"""
main.py
========
Central entry point for the Kannada Interpreter.

Run with:
    uvicorn main:app --reload
or:
    python main.py
"""

import logging

from dotenv import load_dotenv

load_dotenv()  # Load .env before any module reads env vars

from kn_interpreter.config import HOST, LOG_LEVEL, PORT, RELOAD  # noqa: E402

# Configure logging for the entire application
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Per-request access lines drown out the session lifecycle logs
for _noisy_logger_name in (
    "aiohttp.access",
    "aiohttp.client",
    "uvicorn.access",
):
    logging.getLogger(_noisy_logger_name).setLevel(logging.WARNING)

from kn_interpreter.api.app import app  # noqa: F401, E402

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=HOST, port=PORT, reload=RELOAD)
