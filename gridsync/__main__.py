"""Run the GridSync API under uvicorn: ``python -m gridsync``."""

import uvicorn

from gridsync.core.config import settings
from gridsync.main import app


def main() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
