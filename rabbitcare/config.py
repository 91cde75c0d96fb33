"""Engine configuration, tunable through RABBITCARE_* environment variables."""

import logging
import os
from dataclasses import dataclass

from rabbitcare.constants import (
    STORAGE_NAMESPACE, PLAYER_ID_KEY, DB_FILE, API_BASE, DECAY_INTERVAL_MS,
    SYNC_INTERVAL_MS, REQUEST_TIMEOUT,
)
from rabbitcare.models import DecayMode

logger = logging.getLogger(__name__)


@dataclass
class EngineConfig:
    namespace: str = STORAGE_NAMESPACE
    player_id_key: str = PLAYER_ID_KEY
    db_path: str = DB_FILE
    api_base: str = API_BASE
    decay_mode: DecayMode = DecayMode.ALWAYS
    decay_interval_ms: int = DECAY_INTERVAL_MS
    sync_interval_ms: int = SYNC_INTERVAL_MS
    request_timeout: float = REQUEST_TIMEOUT
    sync_enabled: bool = True


def _env_number(env, name, default, cast):
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r", name, raw)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r", name, raw)
        return default
    return value


def load_config(env=None) -> EngineConfig:
    env = os.environ if env is None else env
    cfg = EngineConfig()
    cfg.namespace = env.get("RABBITCARE_NAMESPACE", cfg.namespace)
    cfg.db_path = env.get("RABBITCARE_DB", cfg.db_path)
    cfg.api_base = env.get("RABBITCARE_API_BASE", cfg.api_base)
    mode = env.get("RABBITCARE_DECAY_MODE")
    if mode:
        try:
            cfg.decay_mode = DecayMode(mode)
        except ValueError:
            logger.warning("Unknown RABBITCARE_DECAY_MODE=%r, using '%s'", mode, cfg.decay_mode.value)
    cfg.decay_interval_ms = _env_number(env, "RABBITCARE_DECAY_INTERVAL_MS", cfg.decay_interval_ms, int)
    cfg.sync_interval_ms = _env_number(env, "RABBITCARE_SYNC_INTERVAL_MS", cfg.sync_interval_ms, int)
    cfg.request_timeout = _env_number(env, "RABBITCARE_REQUEST_TIMEOUT", cfg.request_timeout, float)
    cfg.sync_enabled = env.get("RABBITCARE_OFFLINE", "") != "1"
    return cfg
