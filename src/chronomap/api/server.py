"""
ASGI Entry Point for the ChronoMap API.

Loads `.env` before the application factory runs so `GOOGLE_API_KEY` and the
cache settings are visible to `load_settings()`.

Usage
-----
    $ python -m chronomap.api.server

Or via uvicorn directly:
    $ uvicorn chronomap.api.server:app --reload
"""

import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from chronomap.api.app import create_app

load_dotenv(dotenv_path=Path(".env"))

app = create_app()


def main() -> None:
    """Run the API server locally for development."""
    key = os.getenv("GOOGLE_API_KEY", "")
    if key:
        print(f"{'GOOGLE_API_KEY':<20} : loaded ({key[:8]}...)")
    else:
        print(f"{'GOOGLE_API_KEY':<20} : missing, serving cache and year 0 only")

    uvicorn.run(
        "chronomap.api.server:app",
        host=os.getenv("CHRONOMAP_HOST", "127.0.0.1"),
        port=int(os.getenv("CHRONOMAP_PORT", "8000")),
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    main()
