import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    # basicConfig is a no-op when the server (uvicorn, pytest) already installed handlers
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger("blocklog").setLevel(level.upper())
