# src/wg_gen/errors.py
from __future__ import annotations

from pathlib import Path
from typing import Optional


class WgGenError(Exception):
    """Base class for every error reported to the caller."""


class EntropyUnavailable(WgGenError):
    pass


class InvalidKey(WgGenError, ValueError):
    pass


class InvalidNetworkFormat(WgGenError, ValueError):
    pass


class InvalidInterfaceName(WgGenError, ValueError):
    pass


class DuplicateClientName(WgGenError, ValueError):
    def __init__(self, name: str):
        super().__init__(f"Client '{name}' already exists")
        self.name = name


class InvalidClientAddress(WgGenError, ValueError):
    pass


class AddressOutsideNetwork(InvalidClientAddress):
    pass


class AddressInUse(InvalidClientAddress):
    pass


class AddressPoolExhausted(WgGenError):
    pass


class ClientNotFound(WgGenError, KeyError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Client '{self.name}' not found"


class PersistenceFailure(WgGenError):
    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class ServerAlreadyInitialized(PersistenceFailure):
    pass


class InvalidClientName(WgGenError, ValueError):
    pass
