# Licensed under the Apache License, Version 2.0
import logging
import os

LOG_LEVEL_ENV_VAR = "FI_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """
    Configure root logging from FI_LOG_LEVEL (default INFO).
    `verbose` forces DEBUG, which is how --verbose surfaces per-entry scan skips.
    """
    level_name = os.getenv(LOG_LEVEL_ENV_VAR, "INFO").upper()
    level = logging.DEBUG if verbose else getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # basicConfig is a no-op once a handler exists; the level still applies.
    logging.getLogger().setLevel(level)
    # The event loop logs its selector choice at DEBUG on every asyncio.run().
    logging.getLogger("asyncio").setLevel(max(level, logging.INFO))
