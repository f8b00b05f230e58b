from __future__ import annotations

import logging

PACKAGE_LOGGER = "jwt_auth"


def configure_logging(level: str = "INFO") -> None:
    """
    Set the level of the ``jwt_auth`` logger tree.

    What each level shows:
    - INFO: ``Token rejected: <cause type>`` from the provider, and JWKS
      refreshes forced by an unknown ``kid``.
    - WARNING: key lookup failures classified as infrastructure errors.
    - DEBUG: periodic JWKS cache refreshes and provider construction.

    The raw token is never part of a log record. Handlers and formatting
    belong to the host application.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level.upper())
    package_logger.propagate = True
