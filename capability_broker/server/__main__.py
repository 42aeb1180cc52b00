"""Run the broker with ``python -m capability_broker.server``."""

import uvicorn

from capability_broker.server.core.config import settings


def main() -> None:
    uvicorn.run(
        "capability_broker.server.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
