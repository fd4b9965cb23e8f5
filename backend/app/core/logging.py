from __future__ import annotations

import logging


def setup_logging(*, environment: str, level: str | None = None) -> None:
    """Configure console logging for the API process.

    Development defaults to DEBUG, everything else to INFO; an explicit
    ``level`` (e.g. ``LOG_LEVEL=WARNING``) wins. Calling it again is a no-op
    once the root logger has handlers.
    """

    root = logging.getLogger()
    if root.handlers:
        return

    env = (environment or "development").lower().strip()
    resolved = logging.DEBUG if env == "development" else logging.INFO
    if level:
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )
    console = logging.StreamHandler()
    console.setLevel(resolved)
    console.setFormatter(formatter)

    logging.basicConfig(level=resolved, handlers=[console])

    logging.getLogger("uvicorn").setLevel(resolved)
    logging.getLogger("uvicorn.error").setLevel(resolved)
    logging.getLogger("uvicorn.access").setLevel(resolved)
    # SQL echo is far too chatty at DEBUG.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
