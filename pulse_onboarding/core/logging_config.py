import logging
import sys

def setup_logging():
    """
    Configure logging for the onboarding service.

    Everything goes to stdout with the plain message format so container
    log collectors can pick it up unchanged.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    # Reduce SQLAlchemy and httpx noise in logs
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return logging.getLogger("pulse_onboarding")


# Create global logger instance
logger = setup_logging()
