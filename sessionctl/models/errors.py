"""sessionctl/models/errors.py — Typed exception hierarchy."""
from __future__ import annotations


class SessionCtlError(Exception): pass

class StorageError(SessionCtlError): pass
class StoreCorruptionError(StorageError): pass

class ConfigError(SessionCtlError): pass
