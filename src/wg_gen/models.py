# src/wg_gen/models.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class KeyPair:
    private: str   # base64, 44 caracteres
    public: str


@dataclass(frozen=True)
class ClientRecord:
    name: str
    address: str               # ex "10.0.0.2"
    keys: KeyPair
    # snapshot du serveur au moment de la creation
    server_endpoint: str
    server_port: int
    server_public_key: str
    allowed_ips: str           # "0.0.0.0/0" ou le reseau du serveur


@dataclass(frozen=True)
class ServerState:
    endpoint: str              # IP publique ou nom de domaine
    listen_port: int           # ex: 51820
    network: str               # ex: "10.0.0.0/24"
    nat_interface: str         # ex: "eth0"
    keys: KeyPair
    clients: Tuple[ClientRecord, ...] = ()
    next_address_offset: int = 2

    def find_client(self, name: str) -> Optional[ClientRecord]:
        for client in self.clients:
            if client.name == name:
                return client
        return None


@dataclass(frozen=True)
class ServerSummary:
    endpoint: str
    listen_port: int
    network: str
    address: str
    nat_interface: str
    public_key: str
    client_count: int
