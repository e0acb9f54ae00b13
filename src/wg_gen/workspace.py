# src/wg_gen/workspace.py
"""
Output directory layout and the commit sequence of each operation.

    <output>/wg-server.json   persisted ServerState
    <output>/wg0.conf         server config for wg-quick
    <output>/<client>.conf    one config per client

State is always written before the text files. There is no transaction
around the whole sequence: a crash after saving the state leaves the .conf
files one operation behind, re-running `export` regenerates them.
"""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import manager
from .errors import ClientNotFound, PersistenceFailure, ServerAlreadyInitialized
from .models import ClientRecord, ServerState
from .render import render_client_conf, render_server_conf
from .state import load_state, save_state

logger = logging.getLogger(__name__)

STATE_FILENAME = "wg-server.json"
SERVER_CONF_NAME = f"{manager.SERVER_INTERFACE}.conf"


@dataclass
class AddResult:
    state: ServerState
    client: ClientRecord
    server_conf: str
    client_conf: str
    client_conf_path: Path


@dataclass
class RevokeResult:
    state: ServerState
    server_conf: str
    removed_file: bool


def state_path(output_dir: Path) -> Path:
    return output_dir / STATE_FILENAME


def server_conf_path(output_dir: Path) -> Path:
    return output_dir / SERVER_CONF_NAME


def client_conf_path(output_dir: Path, name: str) -> Path:
    return output_dir / f"{name}.conf"


# ---------- Fichiers ----------

def _write_conf(path: Path, text: str) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            f.write(text)
        # Attention aux permissions : cles privees
        os.chmod(path, 0o600)
    except OSError as exc:
        raise PersistenceFailure(f"Cannot write {path}: {exc}", path) from exc
    logger.debug("Wrote %s", path)
    return path


def write_server_conf(state: ServerState, output_dir: Path) -> str:
    conf = render_server_conf(state)
    _write_conf(server_conf_path(output_dir), conf)
    return conf


def load(output_dir: Path) -> ServerState:
    path = state_path(output_dir)
    if not path.exists():
        raise PersistenceFailure(
            f"No server configuration found in {output_dir}. Run 'init' first.", path
        )
    return load_state(path)


# ---------- Opérations ----------

def init_server(
    output_dir: Path,
    endpoint: str,
    port: int,
    network: str,
    nat_interface: str,
) -> tuple[ServerState, str]:
    path = state_path(output_dir)
    if path.exists():
        raise ServerAlreadyInitialized(
            f"Server already initialized ({path}). Use 'show' to view it.", path
        )

    state = manager.initialize(endpoint, port, network, nat_interface)
    save_state(state, path)
    conf = write_server_conf(state, output_dir)
    logger.info("Server initialized in %s", output_dir)
    return state, conf


def add_client(
    output_dir: Path,
    name: str,
    address: Optional[str] = None,
    full_tunnel: bool = False,
) -> AddResult:
    state = load(output_dir)
    state, client = manager.add_client(state, name, address, full_tunnel)

    save_state(state, state_path(output_dir))
    server_conf = write_server_conf(state, output_dir)

    client_conf = render_client_conf(client)
    conf_path = _write_conf(client_conf_path(output_dir, name), client_conf)
    logger.info("Client %s added at %s", name, client.address)

    return AddResult(
        state=state,
        client=client,
        server_conf=server_conf,
        client_conf=client_conf,
        client_conf_path=conf_path,
    )


def revoke_client(output_dir: Path, name: str) -> RevokeResult:
    state = load(output_dir)
    state, removed = manager.remove_client(state, name)
    if not removed:
        raise ClientNotFound(name)

    save_state(state, state_path(output_dir))
    server_conf = write_server_conf(state, output_dir)

    conf_path = client_conf_path(output_dir, name)
    removed_file = False
    if conf_path.exists():
        try:
            conf_path.unlink()
        except OSError as exc:
            raise PersistenceFailure(f"Cannot remove {conf_path}: {exc}", conf_path) from exc
        removed_file = True
        logger.debug("Removed %s", conf_path)

    logger.info("Client %s revoked", name)
    return RevokeResult(state=state, server_conf=server_conf, removed_file=removed_file)


def export_client(output_dir: Path, name: str) -> tuple[Path, str]:
    """
    Rewrite <name>.conf from the stored record (snapshot fields included).
    """
    client = manager.get_client(load(output_dir), name)
    conf = render_client_conf(client)
    return _write_conf(client_conf_path(output_dir, name), conf), conf
