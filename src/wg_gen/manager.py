# src/wg_gen/manager.py
from __future__ import annotations
import dataclasses
import logging
import re
from typing import List, Optional, Tuple

from .errors import ClientNotFound, DuplicateClientName, InvalidClientName
from .ipam import (
    allocate_address,
    server_address,
    server_ip,
    validate_explicit_address,
    validate_interface_name,
)
from .keys import generate_keypair
from .models import ClientRecord, ServerState, ServerSummary

logger = logging.getLogger(__name__)

FULL_TUNNEL_ROUTE = "0.0.0.0/0"

# interface wg-quick du serveur, son fichier vit a cote de ceux des clients
SERVER_INTERFACE = "wg0"

# le nom sert aussi de nom de fichier <name>.conf
_CLIENT_NAME_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]{0,63}$")


# ---------- Serveur ----------

def initialize(endpoint: str, port: int, network: str, nat_interface: str) -> ServerState:
    """
    Create the server identity: fresh key pair, base+1 reserved for the
    server, automatic client allocation starting at base+2.
    """
    server_ip(network)
    validate_interface_name(nat_interface)

    state = ServerState(
        endpoint=endpoint,
        listen_port=port,
        network=network,
        nat_interface=nat_interface,
        keys=generate_keypair(),
        clients=(),
        next_address_offset=2,
    )
    logger.debug("Initialized server %s:%d on %s", endpoint, port, network)
    return state


def server_summary(state: ServerState) -> ServerSummary:
    return ServerSummary(
        endpoint=state.endpoint,
        listen_port=state.listen_port,
        network=state.network,
        address=server_address(state.network),
        nat_interface=state.nat_interface,
        public_key=state.keys.public,
        client_count=len(state.clients),
    )


# ---------- Gestion des clients ----------

def validate_client_name(name: str) -> str:
    if not _CLIENT_NAME_RE.match(name):
        raise InvalidClientName(f"Invalid client name: {name!r}")
    if name == SERVER_INTERFACE:
        raise InvalidClientName(f"Client name {name!r} is reserved for the server")
    return name


def add_client(
    state: ServerState,
    name: str,
    explicit_address: Optional[str] = None,
    full_tunnel: bool = False,
) -> Tuple[ServerState, ClientRecord]:
    validate_client_name(name)
    if state.find_client(name) is not None:
        raise DuplicateClientName(name)

    used = [c.address for c in state.clients]
    next_offset = state.next_address_offset
    if explicit_address is not None:
        address = validate_explicit_address(state.network, explicit_address, used)
    else:
        address, next_offset = allocate_address(state.network, next_offset, used)

    client = ClientRecord(
        name=name,
        address=address,
        keys=generate_keypair(),
        server_endpoint=state.endpoint,
        server_port=state.listen_port,
        server_public_key=state.keys.public,
        allowed_ips=FULL_TUNNEL_ROUTE if full_tunnel else state.network,
    )

    new_state = dataclasses.replace(
        state,
        clients=state.clients + (client,),
        next_address_offset=next_offset,
    )
    logger.debug("Added client %s at %s", name, address)
    return new_state, client


def remove_client(state: ServerState, name: str) -> Tuple[ServerState, bool]:
    remaining = tuple(c for c in state.clients if c.name != name)
    if len(remaining) == len(state.clients):
        return state, False

    logger.debug("Removed client %s", name)
    return dataclasses.replace(state, clients=remaining), True


def get_client(state: ServerState, name: str) -> ClientRecord:
    client = state.find_client(name)
    if client is None:
        raise ClientNotFound(name)
    return client


def list_clients(state: ServerState) -> List[Tuple[str, str]]:
    return [(c.name, c.address) for c in state.clients]
