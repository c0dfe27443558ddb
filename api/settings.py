"""Server settings read from the environment."""

import logging
import os

from game.rules import DEFAULT_MAX_PLAYERS

ENV_LOG_LEVEL = "MAFIA_LOG_LEVEL"
ENV_RANDOM_SEED = "MAFIA_RANDOM_SEED"
ENV_DEFAULT_MAX_PLAYERS = "MAFIA_DEFAULT_MAX_PLAYERS"
ENV_CORS_ORIGINS = "MAFIA_CORS_ORIGINS"


def _int_env(name: str) -> int | None:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring non-integer %s=%r", name, raw)
        return None


def get_log_level() -> int:
    name = os.environ.get(ENV_LOG_LEVEL, "INFO").upper()
    return getattr(logging, name, logging.INFO)


def get_random_seed() -> int | None:
    """Seed for role shuffles and fake detective results; None means unseeded."""
    return _int_env(ENV_RANDOM_SEED)


def get_default_max_players() -> int:
    return _int_env(ENV_DEFAULT_MAX_PLAYERS) or DEFAULT_MAX_PLAYERS


def get_cors_origins() -> list[str]:
    raw = os.environ.get(ENV_CORS_ORIGINS, "*")
    return [o.strip() for o in raw.split(",") if o.strip()] or ["*"]
