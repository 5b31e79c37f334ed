import argparse
import logging
import sys

from .config import ProxyConfig, load_config
from .errors import ProxyTunnelError
from .proxy_handler import ProxyHandler
from .tunnel import TunnelTransport, format_target


logger = logging.getLogger(__name__)


def parse_header(value: str) -> tuple[str, str]:
    name, colon, header_value = value.partition(":")
    if not colon or not name.strip():
        raise argparse.ArgumentTypeError(f"Header must look like 'Name: value', got {value!r}")
    return name.strip(), header_value.strip()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="proxytunnel",
        description="Open a TCP tunnel through an HTTP proxy with a CONNECT request.",
    )

    parser.add_argument("proxy_host", help="The proxy host.")
    parser.add_argument("proxy_port", type=int, help="The proxy port.")
    parser.add_argument("target_host", help="The host the tunnel should reach.")
    parser.add_argument("target_port", type=int, help="The port the tunnel should reach.")

    parser.add_argument("-H", "--header", action="append", type=parse_header, default=[],
                        dest="headers", help="Extra CONNECT header, e.g. 'Proxy-Authorization: Basic ...'.")
    parser.add_argument("--config", type=str, default=None, help="JSON file with proxy settings.")
    parser.add_argument("--timeout", type=float, default=None, help="Socket timeout in seconds.")
    parser.add_argument("--dry-run", action="store_true", help="Print the CONNECT request and exit.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")

    return parser.parse_args(argv)


def build_config(args) -> ProxyConfig:
    settings = {}
    if args.config:
        settings = load_config(args.config).model_dump()

    settings["host"] = args.proxy_host
    settings["port"] = args.proxy_port
    settings["headers"] = {**settings.get("headers", {}), **dict(args.headers)}
    if args.timeout is not None:
        settings["timeout"] = args.timeout

    return ProxyConfig(**settings)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args)
    except (ProxyTunnelError, ValueError) as e:
        sys.exit(f"Error: {e}")

    if args.dry_run:
        target = format_target(args.target_host, args.target_port)
        sys.stdout.write(ProxyHandler().create_proxy_request(target, config.headers))
        return 0

    tunnel = TunnelTransport(config)
    try:
        tunnel.connect(args.target_host, args.target_port)
    except ProxyTunnelError as e:
        logger.error("Tunnel failed: %s", e)
        sys.exit(f"Error: {e}")

    try:
        print(f"Tunnel established: {tunnel.response.status()}")
    finally:
        tunnel.close()
    return 0
