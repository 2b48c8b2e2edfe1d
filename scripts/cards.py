"""Command-line helper for issuing and managing access keys.

This module serves as a CLI wrapper around uclbrt.core.access services.
Credentials come from UCLBRT_* environment variables or /run/secrets.
"""
from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from uclbrt.config import load_settings
from uclbrt.core.access import (
    DeviceCardService,
    KeyService,
    LinkService,
    RecordService,
    UclbrtClient,
)
from uclbrt.core.exceptions import UclbrtError


def build_client(args: argparse.Namespace) -> UclbrtClient:
    """Create a client from settings, applying command-line overrides."""
    settings = load_settings()
    if args.api_host:
        settings.api_host = args.api_host
    if args.card_host:
        settings.card_host = args.card_host
    if args.community_no:
        settings.community_no = args.community_no
    if args.insecure:
        settings.verify_tls = False
    if args.debug:
        settings.debug = True
    return UclbrtClient.from_settings(settings)


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="uclbrt access key helper")
    parser.add_argument("--api-host")
    parser.add_argument("--card-host")
    parser.add_argument("--community-no", type=int)
    parser.add_argument("--insecure", action="store_true",
                       help="Skip TLS certificate verification")
    parser.add_argument("--debug", action="store_true")

    sub = parser.add_subparsers(dest="cmd")

    sc = sub.add_parser("create-room-key")
    sc.add_argument("--mobile", required=True)
    sc.add_argument("--area-code", default="86")
    sc.add_argument("--room-no", required=True)
    sc.add_argument("--floor-no", default="")
    sc.add_argument("--build-no", default="")
    sc.add_argument("--start-time", default="")
    sc.add_argument("--end-time", default="")
    sc.add_argument("--send-sms", action="store_true")

    sl = sub.add_parser("get-link")
    sl.add_argument("--mobile", required=True)
    sl.add_argument("--area-code", default="86")
    sl.add_argument("--card-no", default="")
    sl.add_argument("--card-type", type=int, choices=[0, 1, 2], default=0)

    sx = sub.add_parser("cancel-room-key")
    sx.add_argument("--card-no", required=True)

    sr = sub.add_parser("report-lost")
    sr.add_argument("--card-no", required=True)
    sr.add_argument("--whole-room", action="store_true")

    sub.add_parser("mac-list")
    sub.add_parser("room-info")

    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 0

    if args.debug:
        logging.basicConfig(level=logging.DEBUG)

    try:
        client = build_client(args)
        if args.cmd == "create-room-key":
            result = KeyService(client).create_room_key(
                args.mobile, args.area_code, args.room_no, args.floor_no, args.build_no,
                args.start_time, args.end_time, 1 if args.send_sms else 0,
            )
        elif args.cmd == "get-link":
            result = LinkService(client).get_link(args.mobile, args.area_code, args.card_no, args.card_type)
        elif args.cmd == "cancel-room-key":
            result = KeyService(client).cancel_room_key(args.card_no)
        elif args.cmd == "report-lost":
            result = KeyService(client).report_card_lost(args.card_no, args.whole_room)
        elif args.cmd == "mac-list":
            result = DeviceCardService(client).get_mac_list()
        else:
            result = RecordService(client).fetch_room_info()
    except UclbrtError as exc:
        print(f"[cards] {type(exc).__name__}: {exc}", file=sys.stderr)
        return 1

    if isinstance(result, (dict, list)):
        print(json.dumps(result, ensure_ascii=False, indent=2))
    else:
        print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
