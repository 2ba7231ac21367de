#!/usr/bin/env python3

"""
Provisioning strategies for syslog drains.

service:     create a user provided service with the drain url and bind it
application: push a syslog forwarder app that reads from log cache

Each step is a cf command. The first failure raises and nothing that was
already created is cleaned up.
"""

from typing import NamedTuple, Optional

import hashlib
import logging
import os
import sys
import uuid

from cf_drain.errors import CommandError, CredentialError, UnknownSourceError, UsageError

logger = logging.getLogger(__name__)

SERVICE_ADAPTER = "service"
APPLICATION_ADAPTER = "application"

SERVICE_NAME_PREFIX = "cf-drain-"
FORWARDER_ASSET = "syslog_forwarder"
FORWARDER_BUILDPACK = "binary_buildpack"
FORWARDER_CLIENT_ID = "cf"
FORWARDER_DRAIN_SCOPE = "single"
USER_ROLE = "SpaceDeveloper"
PASSWORD_ENTROPY_BYTES = 20


class Identity(NamedTuple):
    source_id: str
    org: str
    space: str
    api_endpoint: str


class Credential(NamedTuple):
    username: str
    password: str


def service_name(drain_name: Optional[str] = None, new_guid=uuid.uuid4) -> str:
    if drain_name:
        return drain_name
    return f"{SERVICE_NAME_PREFIX}{new_guid()}"


def generate_password(random_bytes=os.urandom) -> str:
    return hashlib.sha256(random_bytes(PASSWORD_ENTROPY_BYTES)).hexdigest()


def create_and_bind_service(cli, url: str, app_name: str, name: str):
    cli.get_app(app_name)

    logger.info(f"Creating user provided service {name}")
    cli.run(["create-user-provided-service", name, "-l", url])

    logger.info(f"Binding {name} to {app_name}")
    cli.run(["bind-service", app_name, name])


def source_id(cli, app_or_service_name: str) -> str:
    try:
        return cli.get_app(app_or_service_name).guid
    except CommandError:
        logger.debug(f"{app_or_service_name} is not an app, trying service instances")

    try:
        return cli.get_service(app_or_service_name).guid
    except CommandError:
        raise UnknownSourceError(app_or_service_name)


def resolve_identity(cli, app_or_service_name: str) -> Identity:
    guid = source_id(cli, app_or_service_name)
    org = cli.current_org()
    space = cli.current_space()
    return Identity(guid, org.name, space.name, cli.api_endpoint())


def create_user(cli, username: str, random_bytes=os.urandom) -> str:
    """Creates a space developer for the forwarder and returns its password."""
    password = generate_password(random_bytes)

    logger.info(f"Creating user {username}")
    cli.run(["create-user", username, password])

    org = cli.current_org()
    space = cli.current_space()
    cli.run(["set-space-role", username, org.name, space.name, USER_ROLE])
    return password


def prompt_password(username: str, password_reader) -> str:
    print(f"Enter a password for {username}: ", end="", file=sys.stderr, flush=True)
    try:
        password = password_reader(0)
    except (OSError, EOFError, ValueError) as e:
        raise CredentialError(str(e))

    if isinstance(password, bytes):
        password = password.decode("utf-8")
    if not password:
        raise CredentialError("Password cannot be blank.")
    return password


def resolve_credential(
    cli,
    identity: Identity,
    username: Optional[str],
    password: Optional[str],
    password_reader,
    random_bytes=os.urandom,
) -> Credential:
    if not username:
        username = f"drain-{identity.source_id}"
        password = create_user(cli, username, random_bytes)

    if not password:
        password = prompt_password(username, password_reader)

    return Credential(username, password)


def forwarder_env(
    identity: Identity,
    app_or_service_name: str,
    credential: Credential,
    url: str,
    skip_cert_verify: bool,
    group_name: str,
):
    host_name = f"{identity.org}.{identity.space}.{app_or_service_name}"
    return [
        ("SOURCE_ID", identity.source_id),
        ("SOURCE_HOST_NAME", host_name),
        ("UAA_URL", identity.api_endpoint.replace("api.", "uaa.", 1)),
        ("CLIENT_ID", FORWARDER_CLIENT_ID),
        ("USERNAME", credential.username),
        ("PASSWORD", credential.password),
        ("LOG_CACHE_HTTP_ADDR", identity.api_endpoint.replace("api.", "log-cache.", 1)),
        ("SYSLOG_URL", url),
        ("SKIP_CERT_VERIFY", "true" if skip_cert_verify else "false"),
        ("GROUP_NAME", group_name),
        ("DRAIN_SCOPE", FORWARDER_DRAIN_SCOPE),
    ]


def push_syslog_forwarder(
    cli,
    url: str,
    app_or_service_name: str,
    name: str,
    username: Optional[str],
    password: Optional[str],
    downloader,
    password_reader,
    new_guid=uuid.uuid4,
    random_bytes=os.urandom,
):
    identity = resolve_identity(cli, app_or_service_name)
    credential = resolve_credential(
        cli, identity, username, password, password_reader, random_bytes
    )

    path = os.path.dirname(downloader.download(FORWARDER_ASSET))
    logger.info(f"Pushing syslog forwarder {name} from {path}")
    cli.run(
        [
            "push",
            name,
            "-p", path,
            "-b", FORWARDER_BUILDPACK,
            "-c", f"./{FORWARDER_ASSET}",
            "--no-start",
        ]
    )

    skip_cert_verify = cli.ssl_disabled()
    env = forwarder_env(
        identity,
        app_or_service_name,
        credential,
        url,
        skip_cert_verify,
        str(new_guid()),
    )
    for key, value in env:
        cli.run_without_terminal_output(["set-env", name, key, value])

    logger.info(f"Starting syslog forwarder {name}")
    cli.run(["start", name])


def provision(
    cli,
    request,
    downloader=None,
    password_reader=None,
    new_guid=uuid.uuid4,
    random_bytes=os.urandom,
):
    name = service_name(request.drain_name, new_guid)

    if request.adapter_type == SERVICE_ADAPTER:
        create_and_bind_service(cli, request.drain_url, request.app_or_service_name, name)
    elif request.adapter_type == APPLICATION_ADAPTER:
        push_syslog_forwarder(
            cli,
            request.drain_url,
            request.app_or_service_name,
            name,
            request.username,
            request.password,
            downloader,
            password_reader,
            new_guid=new_guid,
            random_bytes=random_bytes,
        )
    else:
        raise UsageError("unsupported adapter type, must be 'service' or 'application'")
    return name
