"""Portal entrypoint.

Run with:
  python -m portal
"""

import logging
import os
import sys

import uvicorn

from portal.app import create_app
from portal.auth.store import CredentialStore, StoreError
from portal.config import DEFAULT_CONFIG_PATH, load_config

logger = logging.getLogger("portal")


def main() -> None:
    logging.basicConfig(
        level=os.getenv("PORTAL_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = load_config(os.getenv("PORTAL_CONFIG", DEFAULT_CONFIG_PATH))

    try:
        CredentialStore(config.db_name).bootstrap()
    except StoreError as e:
        logger.error("%s", e)
        sys.exit(1)

    host = os.getenv("PORTAL_HOST", "0.0.0.0")
    logger.info("Listening on %s:%s", host, config.port)
    uvicorn.run(create_app(config), host=host, port=config.port)

if __name__ == "__main__":
    main()
