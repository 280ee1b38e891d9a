#------------------------------------------
"""Author: Anselem Okeke
    MIT License
    Copyright (c) 2025 Anselem Okeke
    See LICENSE file in the project root for full license text.
"""
#------------------------------------------
import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

PKG_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_PATH = PKG_ROOT / "config" / "service_guard.json"
LOCAL_CONFIG_PATH = Path("config") / "service_guard.json"

log = logging.getLogger("svcguard.config")


@dataclass(frozen=True)
class Settings:
    event_source: str = "ServiceGuard"
    start_wait_s: float = 20
    reboot_timeout_s: float = 300
    post_reboot_wait_s: float = 20
    local_reboot_delay_s: int = 5
    reboot_poll_interval_s: float = 5
    ping_count: int = 1
    ping_timeout_s: int = 2
    command_timeout_s: float = 30
    ssh_user: str = ""
    ssh_connect_timeout_s: int = 5
    remote_sudo: bool = True
    backend: str = "auto"          # auto | windows | systemd
    dry_run: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/service_guard.log"


# env var -> (field, caster)
ENV_OVERRIDES = {
    "SVCGUARD_EVENT_SOURCE": ("event_source", str),
    "SVCGUARD_START_WAIT": ("start_wait_s", float),
    "SVCGUARD_REBOOT_TIMEOUT": ("reboot_timeout_s", float),
    "SVCGUARD_POST_REBOOT_WAIT": ("post_reboot_wait_s", float),
    "SVCGUARD_LOCAL_REBOOT_DELAY": ("local_reboot_delay_s", int),
    "SVCGUARD_BACKEND": ("backend", str),
    "SVCGUARD_SSH_USER": ("ssh_user", str),
    "SVCGUARD_LOG_FILE": ("log_file", str),
    "DRY_RUN": ("dry_run", None),
    "LOG_LEVEL": ("log_level", str),
}


def env_flag(val):
    return str(val).strip().lower() in ("1", "true", "yes", "y")


def resolve_config_path(path=None):
    """--config, then SVCGUARD_CONFIG, then ./config/service_guard.json, then the packaged default."""
    if path:
        return Path(path).expanduser()
    env_cfg = os.getenv("SVCGUARD_CONFIG")
    if env_cfg:
        return Path(env_cfg).expanduser()
    local = Path.cwd() / LOCAL_CONFIG_PATH
    if local.is_file():
        return local
    return DEFAULT_CONFIG_PATH


def _from_file(cfg_path):
    if not cfg_path.exists():
        return {}
    try:
        data = json.loads(cfg_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.warning(f"could not read {cfg_path}: {e}; using defaults")
        return {}
    if not isinstance(data, dict):
        log.warning(f"{cfg_path} must hold a JSON object; using defaults")
        return {}

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        log.warning(f"ignoring unknown settings in {cfg_path}: {', '.join(unknown)}")
    return {k: v for k, v in data.items() if k in known}


def apply_env_overrides(settings, environ=None):
    environ = os.environ if environ is None else environ
    changes = {}
    for var, (field, cast) in ENV_OVERRIDES.items():
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        try:
            changes[field] = env_flag(raw) if cast is None else cast(raw)
        except ValueError:
            log.warning(f"could not apply {var}={raw!r} override")
    return replace(settings, **changes) if changes else settings


def load_settings(path=None, environ=None):
    """Defaults <- JSON config file <- environment."""
    cfg_path = resolve_config_path(path)
    settings = Settings(**_from_file(cfg_path))
    return apply_env_overrides(settings, environ)
