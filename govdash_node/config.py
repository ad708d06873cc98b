# govdash_node/config.py
import copy
import logging
import os
import yaml
from typing import Any, Dict, List, Tuple

log = logging.getLogger(__name__)

CONFIG_FILENAME = "govdash_config.yaml"


class ConfigError(ValueError):
    """A config value is present but cannot be used."""


# -------- Defaults (non-secret) --------
_DEFAULT: Dict[str, Any] = {
    "server": {
        "host": "127.0.0.1",  # uvicorn bind address
        "port": 8000,  # uvicorn port
    },
    "cors": {
        # Origins allowed to call the dashboard API
        "origins": [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    },
    "logging": {"level": "INFO"},
    "storage": {
        "driver": "memory",  # memory | json
        "json_path": "govdash_state.json",
        "seed_demo": True,  # seed the demo proposals into an empty store
    },
    "governance": {
        "list_default_limit": 20,
        "list_max_limit": 50,
        # Fixed weight (wei) added per vote; voting power is not computed here.
        "vote_weight": str(1000 * 10**18),
        "voting_delay_sec": 86400,
        "voting_period_sec": 7 * 86400,
        # Reject a repeat vote before calling the store. Stores always
        # refuse a second vote per voter, so turning this off only moves
        # the rejection into the store.
        "enforce_single_vote": True,
    },
}

# -------- ENV overrides --------
_ENV_MAP = {
    ("server", "host"): ("GOVDASH_HOST", str),
    ("server", "port"): ("GOVDASH_PORT", int),
    ("logging", "level"): ("GOVDASH_LOG_LEVEL", str),
    ("storage", "driver"): ("GOVDASH_STORAGE_DRIVER", str),
    ("storage", "json_path"): ("GOVDASH_STATE_PATH", str),
    ("governance", "vote_weight"): ("GOVDASH_VOTE_WEIGHT", int),
}


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in (overlay or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _apply_env_overrides(cfg: Dict[str, Any]) -> Dict[str, Any]:
    # Apply typed ENV overrides
    for (section, key), (env_name, cast) in _ENV_MAP.items():
        val = os.getenv(env_name)
        if val is not None:
            try:
                casted = cast(val)
            except ValueError:
                log.warning("%s=%r is not a valid %s; passing it through", env_name, val, cast.__name__)
                casted = val
            cfg.setdefault(section, {})
            cfg[section][key] = casted
    return cfg


def default_config() -> Dict[str, Any]:
    return copy.deepcopy(_DEFAULT)


def load_config(repo_root: str) -> Dict[str, Any]:
    """
    Loads the YAML config from repo_root/govdash_config.yaml.
    Returns defaults if the file doesn't exist or can't be parsed.
    Also applies ENV overrides for certain keys.
    """
    path = os.path.join(repo_root, CONFIG_FILENAME)
    cfg = default_config()

    if os.path.exists(path):
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError("top-level YAML value must be a mapping")
            cfg = _deep_merge(cfg, data)
        except (OSError, ValueError, yaml.YAMLError):
            # fall back to defaults
            log.warning("Ignoring unreadable config %s", path, exc_info=True)

    cfg = _apply_env_overrides(cfg)

    # Normalize CORS origins to a list
    origins = cfg.get("cors", {}).get("origins")
    if isinstance(origins, str):
        cfg["cors"]["origins"] = [origins]

    return cfg


# -------- Small helpers used by the app --------
def get_bind_host(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("server", {}).get("host", "127.0.0.1"))


def get_bind_port(cfg: Dict[str, Any]) -> int:
    return int(cfg.get("server", {}).get("port", 8000))


def get_cors_origins(cfg: Dict[str, Any]) -> List[str]:
    return list(cfg.get("cors", {}).get("origins", []))


def get_log_level(cfg: Dict[str, Any]) -> int:
    name = str(cfg.get("logging", {}).get("level", "INFO")).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_vote_weight(cfg: Dict[str, Any]) -> int:
    """
    Weight each accepted vote adds to a tally. Kept as a decimal string in
    the defaults so YAML never round-trips it through a float.
    """
    raw = cfg.get("governance", {}).get("vote_weight", _DEFAULT["governance"]["vote_weight"])
    try:
        weight = int(str(raw).strip())
    except ValueError:
        raise ConfigError(
            f"governance.vote_weight (GOVDASH_VOTE_WEIGHT) must be a whole number of wei, got {raw!r}"
        ) from None
    if weight < 0:
        raise ConfigError("governance.vote_weight must be non-negative")
    return weight


def get_list_limits(cfg: Dict[str, Any]) -> Tuple[int, int]:
    gov = cfg.get("governance", {})
    return int(gov.get("list_default_limit", 20)), int(gov.get("list_max_limit", 50))


def get_voting_schedule(cfg: Dict[str, Any]) -> Tuple[int, int]:
    gov = cfg.get("governance", {})
    return int(gov.get("voting_delay_sec", 86400)), int(gov.get("voting_period_sec", 7 * 86400))


def get_enforce_single_vote(cfg: Dict[str, Any]) -> bool:
    return bool(cfg.get("governance", {}).get("enforce_single_vote", True))
