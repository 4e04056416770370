"""
Email Builder Backend — Process Entry Point
============================================

Usage:
    python -m emailbuilder           # host/port from HOST / PORT (default 0.0.0.0:5000)
    emailbuilder                     # same, via the console script
"""

import uvicorn

from emailbuilder.config import settings


def main() -> None:
    uvicorn.run(
        "emailbuilder.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
