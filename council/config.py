"""Runtime configuration read from the environment."""

import logging
import os

from council.rules import VOTE_DELAY_SECONDS

logger = logging.getLogger(__name__)

# Env var names
ENV_CARDS_PATH = "COUNCIL_CARDS_PATH"
ENV_VOTE_DELAY = "COUNCIL_VOTE_DELAY_SECONDS"
ENV_SEED = "COUNCIL_SEED"


def get_cards_path() -> str | None:
    """Catalog file to deal from; None means the bundled sample catalog."""
    return os.environ.get(ENV_CARDS_PATH) or None


def get_vote_delay() -> float:
    """Seconds between ballots. Falls back to the default on bad values."""
    raw = os.environ.get(ENV_VOTE_DELAY)
    if raw is None or raw == "":
        return VOTE_DELAY_SECONDS
    try:
        delay = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", ENV_VOTE_DELAY, raw)
        return VOTE_DELAY_SECONDS
    if delay < 0:
        logger.warning("Ignoring %s=%r: must not be negative", ENV_VOTE_DELAY, raw)
        return VOTE_DELAY_SECONDS
    return delay


def get_seed() -> int | None:
    """Optional fixed seed for shuffles and automated votes."""
    raw = os.environ.get(ENV_SEED)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", ENV_SEED, raw)
        return None
