# src/wg_gen/render.py
from __future__ import annotations
from typing import List

from .ipam import server_address
from .models import ClientRecord, ServerState

CLIENT_DNS = ["1.1.1.1", "9.9.9.9"]
KEEPALIVE_SECONDS = 25


def masquerade_rules(nat_interface: str) -> tuple[str, str]:
    """
    PostUp / PostDown: forward traffic coming from the tunnel (%i) and
    masquerade it behind the NAT interface.
    """
    up = (
        "iptables -A FORWARD -i %i -j ACCEPT; "
        f"iptables -t nat -A POSTROUTING -o {nat_interface} -j MASQUERADE"
    )
    down = (
        "iptables -D FORWARD -i %i -j ACCEPT; "
        f"iptables -t nat -D POSTROUTING -o {nat_interface} -j MASQUERADE"
    )
    return up, down


def render_server_conf(state: ServerState) -> str:
    post_up, post_down = masquerade_rules(state.nat_interface)

    lines = [
        "[Interface]",
        f"PrivateKey = {state.keys.private}",
        f"Address = {server_address(state.network)}",
        f"ListenPort = {state.listen_port}",
        f"PostUp = {post_up}",
        f"PostDown = {post_down}",
        "",  # blank line
    ]

    for c in state.clients:
        lines.append("[Peer]")
        lines.append(f"PublicKey = {c.keys.public}")
        lines.append(f"AllowedIPs = {c.address}/32")
        lines.append("")  # blank

    return "\n".join(lines).strip() + "\n"


def render_client_conf(client: ClientRecord) -> str:
    lines: List[str] = [
        "[Interface]",
        f"PrivateKey = {client.keys.private}",
        f"Address = {client.address}/32",
        f"DNS = {', '.join(CLIENT_DNS)}",
        "",
        "[Peer]",
        f"PublicKey = {client.server_public_key}",
        f"Endpoint = {client.server_endpoint}:{client.server_port}",
        f"AllowedIPs = {client.allowed_ips}",
        # keepalive pour les clients derriere un NAT
        f"PersistentKeepalive = {KEEPALIVE_SECONDS}",
    ]

    return "\n".join(lines) + "\n"
