"""Run the API with uvicorn: ``python -m technova``."""

import logging

import uvicorn

from .config import settings


def main() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run("technova.api:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
