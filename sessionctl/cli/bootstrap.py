"""sessionctl/cli/bootstrap.py — Dependency wiring. One place for concrete implementations."""
from __future__ import annotations
import os
from sessionctl.kernel.controller import SessionController
from sessionctl.logging_setup import configure_logging
from sessionctl.memory.flags import (FirstRunFlags, InMemoryKeyValueStore,
                                     KeyValueStore, SQLiteKeyValueStore)
from sessionctl.models.errors import ConfigError
from sessionctl.models.types import ControllerConfig


def load_config(log_level: str | None = None) -> ControllerConfig:
    """Build ControllerConfig from defaults + SESSIONCTL_* env vars."""
    kw: dict = {}
    _e = os.environ.get
    if _e("SESSIONCTL_TIME_UNIT"):
        try: kw["time_unit"] = float(_e("SESSIONCTL_TIME_UNIT"))  # type: ignore
        except ValueError as e:
            raise ConfigError(f"SESSIONCTL_TIME_UNIT must be a number: {e}") from e
    if _e("SESSIONCTL_DB_PATH"):   kw["db_path"] = _e("SESSIONCTL_DB_PATH")
    if _e("SESSIONCTL_LOG_PATH"):  kw["log_path"] = _e("SESSIONCTL_LOG_PATH")
    if _e("SESSIONCTL_NAMESPACE"): kw["namespace"] = _e("SESSIONCTL_NAMESPACE")
    if log_level:
        kw["log_level"] = log_level
    try:
        return ControllerConfig(**kw)
    except ValueError as e:
        raise ConfigError(str(e)) from e


def open_store(config: ControllerConfig, ephemeral: bool = False) -> KeyValueStore:
    if ephemeral:
        return InMemoryKeyValueStore()
    return SQLiteKeyValueStore(config.db_path, namespace=config.namespace)


def build_controller(config: ControllerConfig,
                     ephemeral: bool = False) -> tuple[SessionController, FirstRunFlags, KeyValueStore]:
    """Wire up the controller. Returns (controller, flags, store); caller closes store."""
    configure_logging(log_level=config.log_level, log_path=config.log_path)
    store = open_store(config, ephemeral=ephemeral)
    flags = FirstRunFlags(store)
    try:
        controller = SessionController(flags, config=config)
    except Exception:
        store.close()
        raise
    return controller, flags, store
