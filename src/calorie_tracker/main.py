"""Run the calorie tracker with uvicorn."""

import logging

import uvicorn

from calorie_tracker.api.app import create_app
from calorie_tracker.config import Settings
from calorie_tracker.containers import build_container


def main() -> None:
    """Start the HTTP server on the configured port."""
    settings = Settings()
    app = create_app(build_container(settings))
    logging.getLogger(__name__).info(
        "Calorie tracker running at http://localhost:%s", settings.port
    )
    uvicorn.run(app, host="0.0.0.0", port=settings.port)  # noqa: S104


if __name__ == "__main__":
    main()
