"""Process entry-point: serve the app with uvicorn."""

import logging
import sys

import uvicorn

from src.upload_relay.config import settings

logger = logging.getLogger(__name__)


def run() -> None:
    """Serve on ``settings.host:settings.port``.

    Idle keep-alive connections are held for ``settings.timeout_keep_alive``
    seconds so slow clients are not dropped between requests.

    uvicorn exposes no header-read timeout, so no 120 s header deadline is
    enforced here.  A client that trickles its request headers holds the
    connection indefinitely; put a proxy with a header timeout in front of
    the relay where that matters.
    """
    from src.upload_relay.main import app

    logger.info("Upload relay listening on port %d", settings.port)
    try:
        uvicorn.run(
            app,
            host=settings.host,
            port=settings.port,
            timeout_keep_alive=settings.timeout_keep_alive,
            log_level=settings.log_level.lower(),
        )
    except Exception:
        logger.exception("Failed to start the server")
        sys.exit(1)


if __name__ == "__main__":
    run()
