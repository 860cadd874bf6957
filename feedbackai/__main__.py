"""Run the API server: ``python -m feedbackai``."""

import uvicorn

from feedbackai.config import settings


def main() -> None:
    uvicorn.run(
        "feedbackai.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
