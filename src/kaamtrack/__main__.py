"""Run the KaamTrack API with uvicorn: `python -m kaamtrack`."""

import uvicorn

from kaamtrack.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "kaamtrack.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
