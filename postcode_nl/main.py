"""
Main module for the Postcode.nl API command line client.

This module provides a command-line interface to every API operation of the
client. Each sub-command performs one call, prints the decoded JSON result and,
on request, the response headers of that call.

Functions:
    parse_args(argv=None):
        Parses command-line arguments.

    configure_logging(log_file: str | None, verbosity: int):
        Configures logging handlers and verbosity levels.

    log_event(event: str, **fields):
        Logs structured events as JSON records.

    show_headers(headers: Dict[str, List[str]]):
        Displays response headers in a formatted table.

    main(argv=None):
        Entry point for the CLI.

Usage:
    postcode-nl postcode "2012 ES" 30
    postcode-nl validate Netherlands --postcode "2012 ES" --building 30

(c) Passlick Development 2025. All rights reserved.
"""


from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import uuid
from pathlib import Path
from typing import Dict, List
from rich.console import Console
from rich.table import Table
from rich import box
from rich.markup import escape

from . import __version__
from .client import Client, is_valid_dutch_postcode_format
from .config import ConfigError, load_settings
from .errors import ApiError
from .response import ApiResult

console = Console()

SESSION_ENV = "POSTCODE_NL_SESSION"


class CommandError(Exception):
    pass


def _default_session() -> str:
    return os.environ.get(SESSION_ENV) or uuid.uuid4().hex


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="postcode-nl",
        description="Postcode.nl API CLI - Look up and validate addresses through the Postcode.nl API")
    parser.add_argument("--config", default=None,
                        help="Set path to YAML file with key/secret/platform")
    parser.add_argument("--platform", default=None,
                        help="Override platform label sent in the User-Agent")
    parser.add_argument("--headers", action="store_true",
                        help="Show response headers of the call")
    parser.add_argument("--log-file", default=None,
                        help="Set path to log file")
    parser.add_argument("-v", "--verbose", action="count",
                        default=0, help="Verbose output")
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("autocomplete", help="International address autocomplete")
    p.add_argument("context")
    p.add_argument("term")
    p.add_argument("--language", default=None)
    p.add_argument("--session", default=None)

    p = sub.add_parser("details", help="International address details")
    p.add_argument("context")
    p.add_argument("--session", default=None)

    sub.add_parser("countries", help="List supported countries")

    p = sub.add_parser("postcode", help="Dutch address by postcode and house number")
    p.add_argument("postcode")
    p.add_argument("house_number", type=int)
    p.add_argument("addition", nargs="?", default=None)

    p = sub.add_parser("exact", help="Dutch address exact match")
    p.add_argument("city")
    p.add_argument("street")
    p.add_argument("house_number", type=int)
    p.add_argument("addition", nargs="?", default="")

    p = sub.add_parser("rd", help="Dutch address by RD coordinates")
    p.add_argument("x", type=float)
    p.add_argument("y", type=float)

    p = sub.add_parser("latlon", help="Dutch address by latitude/longitude")
    p.add_argument("latitude", type=float)
    p.add_argument("longitude", type=float)

    p = sub.add_parser("bag-number-designation", help="Dutch address by BAG number designation id")
    p.add_argument("id")

    p = sub.add_parser("bag-addressable-object", help="Dutch address by BAG addressable object id")
    p.add_argument("id")

    p = sub.add_parser("ranges", help="Dutch postcode ranges")
    p.add_argument("postcode")

    p = sub.add_parser("validate", help="Validate an international address")
    p.add_argument("country", help="Country name or iso3 code")
    for name in ("postcode", "locality", "street", "building", "region", "street-and-building"):
        p.add_argument(f"--{name}", default=None)

    p = sub.add_parser("country", help="Look up a country")
    p.add_argument("query")

    sub.add_parser("account-info", help="Show account information")

    p = sub.add_parser("create-account", help="Create a reseller client account")
    for name in ("company-name", "country-iso", "vat-number", "contact-email",
                 "invoice-email", "invoice-reference", "invoice-address-line1",
                 "invoice-address-line2", "invoice-address-postal-code",
                 "invoice-address-locality", "invoice-address-region",
                 "invoice-address-country-iso"):
        p.add_argument(f"--{name}", default="")
    p.add_argument("--subscription-amount", type=int, default=1)
    p.add_argument("--site-url", action="append", default=[], dest="site_urls")
    p.add_argument("--invoice-contact-name", default=None)
    p.add_argument("--test", action="store_true", help="Create a test account")

    p = sub.add_parser("check-postcode", help="Check Dutch postcode format locally")
    p.add_argument("postcode")
    return parser.parse_args(argv)


def configure_logging(log_file: str | None, verbosity: int):
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        handlers.append(fh)
    logging.basicConfig(level=level, handlers=handlers, format="%(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)


def log_event(event: str, **fields):
    record = {"event": event, **fields}
    logging.getLogger(__name__).info(json.dumps(record, ensure_ascii=False))


def show_headers(headers: Dict[str, List[str]]):
    table = Table(title="RESPONSE HEADERS", box=box.SIMPLE_HEAVY)
    table.add_column("NAME")
    table.add_column("VALUE")
    for name, values in headers.items():
        for value in values:
            table.add_row(name, value)
    console.print(table)


def run_command(api: Client, args) -> ApiResult:
    cmd = args.command
    if cmd == "autocomplete":
        return api.international_autocomplete(
            args.context, args.term, args.session or _default_session(), args.language)
    if cmd == "details":
        return api.international_get_details(args.context, args.session or _default_session())
    if cmd == "countries":
        return api.international_get_supported_countries()
    if cmd == "postcode":
        return api.dutch_address_by_postcode(args.postcode, args.house_number, args.addition)
    if cmd == "exact":
        return api.dutch_address_exact_match(args.city, args.street, args.house_number, args.addition)
    if cmd == "rd":
        return api.dutch_address_rd(args.x, args.y)
    if cmd == "latlon":
        return api.dutch_address_lat_lon(args.latitude, args.longitude)
    if cmd == "bag-number-designation":
        return api.dutch_address_bag_number_designation(args.id)
    if cmd == "bag-addressable-object":
        return api.dutch_address_bag_addressable_object(args.id)
    if cmd == "ranges":
        return api.dutch_address_postcode_ranges(args.postcode)
    if cmd == "validate":
        country = args.country
        # a 3 letter value is taken to be an iso3 code already
        if len(country) != 3:
            found = api.get_country(country)
            if not isinstance(found, dict) or not isinstance(found.get("iso3"), str):
                raise CommandError(f"No iso3 code found for country `{country}`")
            country = found["iso3"]
        return api.validate(
            country.lower(),
            args.postcode,
            args.locality,
            args.street,
            args.building,
            args.region,
            args.street_and_building,
        )
    if cmd == "country":
        return api.get_country(args.query)
    if cmd == "account-info":
        return api.account_info()
    if cmd == "create-account":
        return api.create_client_account(
            args.company_name,
            args.country_iso,
            args.vat_number,
            args.contact_email,
            args.subscription_amount,
            args.site_urls,
            args.invoice_email,
            args.invoice_reference,
            args.invoice_address_line1,
            args.invoice_address_line2,
            args.invoice_address_postal_code,
            args.invoice_address_locality,
            args.invoice_address_region,
            args.invoice_address_country_iso,
            args.invoice_contact_name,
            args.test,
        )
    raise ValueError(f"unknown command {cmd}")


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_file, args.verbose)

    if args.command == "check-postcode":
        valid = is_valid_dutch_postcode_format(args.postcode.strip())
        if valid:
            console.print(f"[green]{args.postcode} is a valid Dutch postcode format[/green]")
            return 0
        console.print(f"[red]{args.postcode} is not a valid Dutch postcode format[/red]")
        return 1

    try:
        settings = load_settings(Path(args.config) if args.config else None)
    except ConfigError as e:
        console.print(f"[red]Configuration error[/red]: {escape(str(e))}")
        return 1
    platform = args.platform or settings.platform
    log_event("startup", command=args.command, platform=platform)

    try:
        with Client(settings.key, settings.secret, platform, referer=settings.referer) as api:
            try:
                result = run_command(api, args)
            finally:
                if args.headers:
                    show_headers(api.response_headers)
    except ApiError as e:
        console.print(f"[red]{e.kind.name}[/red]: {escape(e.message)}")
        log_event("error", command=args.command, kind=e.kind.name, url=e.url,
                  status=e.status_code, error=e.message)
        return 1
    except CommandError as e:
        console.print(f"[red]Command failed[/red]: {escape(str(e))}")
        log_event("error", command=args.command, kind="command", url=api.last_url,
                  status=api.last_status_code, error=str(e))
        return 1

    log_event("sent", command=args.command, url=api.last_url, status=api.last_status_code)
    console.print_json(data=result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
