# src/wg_gen/state.py
from __future__ import annotations
import json
import logging
import os
import tempfile
from pathlib import Path

from .errors import PersistenceFailure
from .models import ClientRecord, KeyPair, ServerState

logger = logging.getLogger(__name__)


def _keys_to_dict(keys: KeyPair) -> dict:
    return {"private": keys.private, "public": keys.public}


def _dict_to_keys(data: dict) -> KeyPair:
    return KeyPair(private=data["private"], public=data["public"])


def state_to_dict(state: ServerState) -> dict:
    return {
        "endpoint": state.endpoint,
        "listen_port": state.listen_port,
        "network": state.network,
        "nat_interface": state.nat_interface,
        "keys": _keys_to_dict(state.keys),
        "clients": [
            {
                "name": c.name,
                "address": c.address,
                "keys": _keys_to_dict(c.keys),
                "server_endpoint": c.server_endpoint,
                "server_port": c.server_port,
                "server_public_key": c.server_public_key,
                "allowed_ips": c.allowed_ips,
            }
            for c in state.clients
        ],
        "next_address_offset": state.next_address_offset,
    }


def dict_to_state(data: dict) -> ServerState:
    clients = tuple(
        ClientRecord(
            name=c["name"],
            address=c["address"],
            keys=_dict_to_keys(c["keys"]),
            server_endpoint=c["server_endpoint"],
            server_port=c["server_port"],
            server_public_key=c["server_public_key"],
            allowed_ips=c["allowed_ips"],
        )
        for c in data.get("clients", [])
    )

    return ServerState(
        endpoint=data["endpoint"],
        listen_port=data["listen_port"],
        network=data["network"],
        nat_interface=data["nat_interface"],
        keys=_dict_to_keys(data["keys"]),
        clients=clients,
        next_address_offset=data["next_address_offset"],
    )


def load_state(path: Path) -> ServerState:
    if not path.exists():
        raise PersistenceFailure(f"State file not found: {path}", path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise PersistenceFailure(f"Cannot read state file {path}: {exc}", path) from exc

    try:
        state = dict_to_state(data)
    except (KeyError, TypeError, AttributeError) as exc:
        raise PersistenceFailure(f"Malformed state file {path}: {exc!r}", path) from exc

    logger.debug("Loaded state from %s (%d clients)", path, len(state.clients))
    return state


def save_state(state: ServerState, path: Path) -> None:
    """
    Write the state next to its final location then rename it over, the
    previous file stays intact if anything fails midway.
    """
    data = state_to_dict(state)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            # contient des cles privees
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise PersistenceFailure(f"Cannot write state file {path}: {exc}", path) from exc

    logger.debug("Saved state to %s", path)
