import uvicorn

from .config import settings
from .main import app, configure_logging


def main() -> None:
    configure_logging(settings.log_level)
    uvicorn.run(
        app,
        host=settings.listen_host,
        port=settings.listen_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
