import argparse
import ipaddress
import logging
import sys
from pathlib import Path

from wg_gen import workspace
from wg_gen.errors import WgGenError
from wg_gen.manager import get_client, list_clients, server_summary
from wg_gen.qr import print_qr, save_qr_png
from wg_gen.render import render_client_conf

logger = logging.getLogger(__name__)

DEFAULT_PORT = 51820
DEFAULT_NETWORK = "10.0.0.0/24"
DEFAULT_NAT_INTERFACE = "eth0"


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}")
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {port}")
    return port


def _ipv4(value: str) -> str:
    try:
        return str(ipaddress.IPv4Address(value))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid IPv4 address: {value!r}")


def _show_qr(conf: str) -> None:
    # le QR est un bonus : un echec ne doit pas annuler l'operation
    try:
        print_qr(conf)
    except Exception as exc:
        logger.warning("Failed to generate QR code: %s", exc)


# ---------------------------------------------------
# Command: init
# ---------------------------------------------------

def cmd_init(args):
    state, _ = workspace.init_server(
        args.output,
        endpoint=args.endpoint,
        port=args.port,
        network=args.network,
        nat_interface=args.interface,
    )

    path = workspace.server_conf_path(args.output)
    summary = server_summary(state)
    print(f"[+] Server initialized: {path}")
    logger.debug("Endpoint  : %s:%d", summary.endpoint, summary.listen_port)
    logger.debug("Network   : %s", summary.network)
    logger.debug("Interface : %s", summary.nat_interface)
    return 0


# ---------------------------------------------------
# Command: client
# ---------------------------------------------------

def cmd_client(args):
    result = workspace.add_client(
        args.output,
        args.name,
        address=args.ip,
        full_tunnel=args.full_tunnel,
    )

    print(f"[+] Client '{args.name}' added: {result.client_conf_path}")
    logger.debug("IP   : %s", result.client.address)
    if args.full_tunnel:
        logger.debug("Mode : full tunnel (all traffic)")
    print("[!] Apply the server config with: sudo wg-quick down wg0 && sudo wg-quick up wg0")

    if args.qr:
        print("\nQR code for mobile import:")
        _show_qr(result.client_conf)
    return 0


# ---------------------------------------------------
# Command: list
# ---------------------------------------------------

def cmd_list(args):
    state = workspace.load(args.output)
    clients = list_clients(state)

    if not clients:
        print("No clients configured.")
        return 0

    print("Configured clients:")
    for name, address in clients:
        print(f"  {name} - {address}")
    return 0


# ---------------------------------------------------
# Command: revoke
# ---------------------------------------------------

def cmd_revoke(args):
    result = workspace.revoke_client(args.output, args.name)

    if result.removed_file:
        logger.debug("Removed client config: %s", workspace.client_conf_path(args.output, args.name))
    print(f"[OK] Client '{args.name}' revoked")
    print(f"[+] Server config updated: {workspace.server_conf_path(args.output)}")
    return 0


# ---------------------------------------------------
# Command: show
# ---------------------------------------------------

def cmd_show(args):
    s = server_summary(workspace.load(args.output))

    print("=== Server ===")
    print(f"Endpoint   : {s.endpoint}:{s.listen_port}")
    print(f"Network    : {s.network}")
    print(f"Address    : {s.address}")
    print(f"Interface  : {s.nat_interface}")
    print(f"Public key : {s.public_key}")
    print(f"Clients    : {s.client_count}")

    conf = workspace.server_conf_path(args.output)
    if conf.exists():
        print(f"WireGuard config : {conf}")
    return 0


# ---------------------------------------------------
# Commands: export / qr
# ---------------------------------------------------

def cmd_export(args):
    path, conf = workspace.export_client(args.output, args.name)

    print(f"[OK] Config written: {path}")
    print("\n--- Configuration ---\n")
    print(conf)
    return 0


def cmd_qr(args):
    client = get_client(workspace.load(args.output), args.name)
    conf = render_client_conf(client)

    if args.png is None:
        _show_qr(conf)
        return 0

    try:
        path = save_qr_png(conf, args.png)
    except Exception as exc:
        logger.warning("Failed to generate QR code: %s", exc)
        return 0
    print(f"[OK] QR code written: {path}")
    return 0


# ---------------------------------------------------
# CLI / Parser
# ---------------------------------------------------

def build_parser():
    parser = argparse.ArgumentParser(
        prog="wg-gen",
        description="Generate WireGuard server and client configurations",
    )
    parser.add_argument("-o", "--output", type=Path, default=Path("."),
                        help="output directory for configurations")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd")

    # init
    p_init = sub.add_parser("init", help="initialize a new WireGuard server")
    p_init.add_argument("-e", "--endpoint", required=True,
                        help="server endpoint (public IP or domain)")
    p_init.add_argument("-p", "--port", type=_port, default=DEFAULT_PORT)
    p_init.add_argument("-n", "--network", default=DEFAULT_NETWORK,
                        help="network subnet, e.g. 10.0.0.0/24")
    p_init.add_argument("-i", "--interface", default=DEFAULT_NAT_INTERFACE,
                        help="network interface used for NAT")
    p_init.set_defaults(func=cmd_init)

    # client
    p_client = sub.add_parser("client", help="add a new client")
    p_client.add_argument("name")
    p_client.add_argument("--ip", type=_ipv4, help="client IP (auto-assigned if omitted)")
    p_client.add_argument("-f", "--full-tunnel", action="store_true",
                          help="route all traffic through the VPN (0.0.0.0/0)")
    p_client.add_argument("-q", "--qr", action="store_true",
                          help="print a QR code for mobile clients")
    p_client.set_defaults(func=cmd_client)

    # list
    p_list = sub.add_parser("list", help="list all clients")
    p_list.set_defaults(func=cmd_list)

    # revoke
    p_revoke = sub.add_parser("revoke", help="revoke a client")
    p_revoke.add_argument("name")
    p_revoke.set_defaults(func=cmd_revoke)

    # show
    p_show = sub.add_parser("show", help="show server configuration")
    p_show.set_defaults(func=cmd_show)

    # export
    p_export = sub.add_parser("export", help="rewrite a client config file")
    p_export.add_argument("name")
    p_export.set_defaults(func=cmd_export)

    # qr
    p_qr = sub.add_parser("qr", help="print or save a client QR code")
    p_qr.add_argument("name")
    p_qr.add_argument("--png", type=Path, help="write a PNG image instead of printing")
    p_qr.set_defaults(func=cmd_qr)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    setup_logging(args.verbose)

    try:
        return args.func(args)
    except WgGenError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
