"""
PhantomBuster LinkedIn Search Relay - Server Entry Point.

Exits immediately when PhantomBuster credentials are missing.
"""

import logging
import sys

from dotenv import load_dotenv

load_dotenv()

import uvicorn  # noqa: E402

from phantom_relay.config import settings  # noqa: E402


def main():
    """Run the relay HTTP server."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    missing = settings.missing_credentials()
    if missing:
        print(f"Error: missing PhantomBuster credentials in environment: {', '.join(missing)}", file=sys.stderr)
        sys.exit(1)

    from phantom_relay.api.app import app

    print(f"Server listening on port {settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
