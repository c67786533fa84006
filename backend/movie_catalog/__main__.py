"""Run the API server: ``python -m movie_catalog``."""

import uvicorn

from movie_catalog.config import settings
from movie_catalog.logger import create_log_config


def main() -> None:
    uvicorn.run(
        "movie_catalog.main:app",
        host=settings.host,
        port=settings.port,
        workers=settings.workers,
        log_config=create_log_config(settings.log_level),
    )


if __name__ == "__main__":
    main()
