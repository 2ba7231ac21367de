#!/usr/bin/env python3

"""
Session access for the cf CLI.

Commands are run through the ``cf`` binary. Session state (target, org,
space, ssl validation) comes from the cf CLI's own config file, the same
file ``cf login`` and ``cf target`` write.
"""

from typing import List, NamedTuple

import json
import logging
import os

from cf_drain.errors import CommandError
from cf_drain.utils import cf, get_cf_home

logger = logging.getLogger(__name__)


class Org(NamedTuple):
    name: str
    guid: str = ""


class Space(NamedTuple):
    name: str
    guid: str = ""


class App(NamedTuple):
    name: str
    guid: str


class ServiceInstance(NamedTuple):
    name: str
    guid: str


def get_config_path():
    return os.path.join(get_cf_home(), ".cf", "config.json")


class CfCli:
    """Command executor backed by the installed cf CLI."""

    def __init__(self, config_path: str = None):
        self.config_path = config_path or get_config_path()

    def run(self, args: List[str]):
        return cf(args)

    def run_without_terminal_output(self, args: List[str]):
        return cf(args, quiet=True)

    def _config(self):
        try:
            with open(self.config_path) as f:
                return json.load(f)
        except FileNotFoundError:
            raise CommandError(
                f"cf config not found at {self.config_path}, run 'cf login' first"
            )
        except (OSError, ValueError) as e:
            raise CommandError(f"Unable to read cf config {self.config_path}: {e}")

    def current_org(self) -> Org:
        fields = self._config().get("OrganizationFields") or {}
        if not fields.get("Name"):
            raise CommandError("No org targeted, use 'cf target -o ORG' to target an org.")
        return Org(fields["Name"], fields.get("GUID", ""))

    def current_space(self) -> Space:
        fields = self._config().get("SpaceFields") or {}
        if not fields.get("Name"):
            raise CommandError(
                "No space targeted, use 'cf target -s SPACE' to target a space."
            )
        return Space(fields["Name"], fields.get("GUID", ""))

    def api_endpoint(self) -> str:
        target = self._config().get("Target")
        if not target:
            raise CommandError(
                "No API endpoint set. Use 'cf login' or 'cf api' to target an endpoint."
            )
        return target

    def ssl_disabled(self) -> bool:
        return bool(self._config().get("SSLDisabled", False))

    def get_app(self, name: str) -> App:
        guid = self.run_without_terminal_output(["app", name, "--guid"]).strip()
        logger.debug(f"Resolved app {name} to {guid}")
        return App(name, guid)

    def get_service(self, name: str) -> ServiceInstance:
        guid = self.run_without_terminal_output(["service", name, "--guid"]).strip()
        logger.debug(f"Resolved service instance {name} to {guid}")
        return ServiceInstance(name, guid)
