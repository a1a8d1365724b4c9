"""Process entrypoint for the transactions API."""

from __future__ import annotations

import logging

import uvicorn

from shared import config


def configure_logging() -> None:
    """Configure the root logger once for the server process."""

    logging.basicConfig(
        level=config.log_level(),
        format="[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main() -> None:
    configure_logging()
    port = config.port()
    logging.getLogger(__name__).info("server_starting url=http://localhost:%s", port)
    uvicorn.run("backend.api:app", host="0.0.0.0", port=port)  # noqa: S104 - container entrypoint


if __name__ == "__main__":
    main()
