#!/usr/bin/env python3

"""
Creates a syslog drain for an app or service instance.

Example usage:
cf-drain create-drain my-app syslog-tls://logs.example.com:6514
cf-drain create-drain --adapter-type application --type metrics my-app https://logs.example.com
"""
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import SplitResult, parse_qsl, urlencode, urlsplit
import argparse
import logging
import os
import string
import sys
import uuid

from cf_drain.errors import DrainError, ParseError, UsageError
from cf_drain.provision import SERVICE_ADAPTER, provision

logger = logging.getLogger(__name__)

DRAIN_TYPES = ("logs", "metrics", "all")
DRAIN_TYPE_PARAM = "drain-type"
SCHEME_CHARS = set(string.ascii_letters + string.digits + "+-.")


@dataclass(frozen=True)
class ProvisionRequest:
    app_or_service_name: str
    drain_url: str
    adapter_type: str = SERVICE_ADAPTER
    drain_name: Optional[str] = None
    drain_type: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def url_error(raw: str):
    """Returns why a drain url is unusable, or None."""
    if any(ord(c) < 0x20 or ord(c) == 0x7F for c in raw):
        return "invalid control character in URL"

    for i, c in enumerate(raw):
        if c == ":":
            if i == 0:
                return "missing protocol scheme"
            break
        if c not in SCHEME_CHARS or (i == 0 and not c.isalpha()):
            # no scheme, so the url is a path whose first segment can't hold a colon
            rest = raw.split("#", 1)[0].split("?", 1)[0]
            segment = rest.split("/", 1)[0]
            if ":" in segment:
                return "first path segment in URL cannot contain colon"
            break

    try:
        parts = urlsplit(raw)
    except ValueError as e:
        return str(e)

    # ports must be numeric, their range is not checked
    hostport = parts.netloc.rpartition("@")[2]
    if hostport.startswith("["):
        port = hostport.partition("]")[2]
    elif ":" in hostport:
        port = hostport[hostport.rindex(":"):]
    else:
        port = ""
    if port and (port[0] != ":" or not all(c in string.digits for c in port[1:])):
        return f'invalid port "{port}" after host'
    return None


def parse_drain_url(raw: str) -> SplitResult:
    reason = url_error(raw)
    if reason:
        raise ParseError(f"Invalid syslog drain URL: parse {raw}: {reason}")
    return urlsplit(raw)


def join_url(parts: SplitResult, authority: bool) -> str:
    url = parts.path
    if parts.netloc or authority:
        url = f"//{parts.netloc}{url}"
    if parts.scheme:
        url = f"{parts.scheme}:{url}"
    if parts.query:
        url = f"{url}?{parts.query}"
    if parts.fragment:
        url = f"{url}#{parts.fragment}"
    return url


def with_drain_type(raw: str, drain_type: str) -> str:
    parts = urlsplit(raw)
    query = {}
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        query.setdefault(key, []).append(value)
    query[DRAIN_TYPE_PARAM] = [drain_type]

    # keep an empty authority, as in syslog:///path
    prefix = f"{parts.scheme}:" if parts.scheme else ""
    authority = raw[len(prefix):].startswith("//")
    return join_url(
        parts._replace(query=urlencode(sorted(query.items()), doseq=True)), authority
    )


def setup_args(parser):
    parser.add_argument(
        "--adapter-type",
        default=SERVICE_ADAPTER,
        help="'service' binds a user provided service, "
        "'application' pushes a syslog forwarder app",
    )
    parser.add_argument(
        "--drain-name",
        help="Name of the drain service or forwarder app, generated if omitted",
    )
    parser.add_argument(
        "--type",
        dest="drain_type",
        help="Which data to drain: logs, metrics or all",
    )
    parser.add_argument(
        "--username",
        help="User the forwarder reads log cache as, created if omitted",
    )
    parser.add_argument(
        "positionals",
        nargs="*",
        metavar="app-or-service-name drain-url",
    )


def positionals(args, extras=()) -> List[str]:
    # options may sit between the positionals, argparse leaves those behind as extras
    unknown = [e for e in extras if e.startswith("-") and e != "-"]
    if unknown:
        raise UsageError(f"unrecognized arguments: {' '.join(unknown)}")
    return list(args.positionals) + list(extras)


def build_request(args, extras=()) -> ProvisionRequest:
    values = positionals(args, extras)
    if len(values) != 2:
        raise UsageError(f"Invalid arguments, expected 2, got {len(values)}.")
    name, raw_url = values

    parse_drain_url(raw_url)
    drain_url = raw_url
    if args.drain_type:
        if args.drain_type not in DRAIN_TYPES:
            raise UsageError(f"Invalid type: {args.drain_type}")
        drain_url = with_drain_type(raw_url, args.drain_type)

    return ProvisionRequest(
        app_or_service_name=name,
        drain_url=drain_url,
        adapter_type=args.adapter_type,
        drain_name=args.drain_name or None,
        drain_type=args.drain_type or None,
        username=args.username or None,
    )


def parse_args(argv: List[str]) -> ProvisionRequest:
    parser = ArgumentParser("create-drain")
    setup_args(parser)
    return build_request(*parser.parse_known_args(argv))


def create_drain(
    cli,
    argv: List[str],
    downloader=None,
    password_reader=None,
    new_guid=uuid.uuid4,
    random_bytes=os.urandom,
):
    request = parse_args(argv)
    return provision(
        cli,
        request,
        downloader,
        password_reader,
        new_guid=new_guid,
        random_bytes=random_bytes,
    )


def main(args, extras=()):
    from cf_drain.cloudfoundry import CfCli
    from cf_drain.downloader import Downloader
    from cf_drain.utils import read_password

    try:
        request = build_request(args, extras)
        logger.debug(f"Creating {request.adapter_type} drain for {request.app_or_service_name}")
        name = provision(CfCli(), request, Downloader(), read_password)
    except DrainError as e:
        logger.error(e.message)
        sys.exit(1)
    logger.info(f"Created drain {name} for {request.app_or_service_name}")
