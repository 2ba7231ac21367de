#!/usr/bin/env python3

from typing import List, Optional

import os
import getpass
import logging
import subprocess
import urllib.request

from cf_drain.errors import CommandError

logger = logging.getLogger(__name__)

CF_BINARY = os.environ.get("CF_DRAIN_CF_BINARY", "cf")

if os.environ.get("CF_DRAIN_COMMAND_TIMEOUT"):
    COMMAND_TIMEOUT = float(os.environ["CF_DRAIN_COMMAND_TIMEOUT"])
else:
    COMMAND_TIMEOUT = None

# values following these arguments never reach the logs
SECRET_ENV_KEYS = {"PASSWORD"}


def get_cf_home():
    return os.environ.get("CF_HOME") or os.path.expanduser("~")


def redact(args: List[str]):
    out = list(args)
    if out and out[0] == "create-user" and len(out) > 2:
        out[2] = "***"
    if out and out[0] == "set-env" and len(out) > 3 and out[2] in SECRET_ENV_KEYS:
        out[3] = "***"
    return out


def read_password(fd: int = 0) -> bytes:
    # getpass masks input on the controlling tty and falls back to stdin
    if fd != 0:
        raise ValueError("passwords can only be read from stdin")
    return getpass.getpass(prompt="").encode("utf-8")


def curl(url, headers=None):
    request = urllib.request.Request(url, headers=headers or {})
    with urllib.request.urlopen(request) as response:
        return response.read().decode("utf-8")


def cf(
    args: List[str],
    quiet: bool = False,
    timeout: Optional[float] = COMMAND_TIMEOUT,
):
    """Run ``cf <args>`` and return its stdout.

    With ``quiet`` the command output is captured instead of being shown on
    the terminal. Failures raise ``CommandError`` carrying cf's own message.
    """
    cmd = [CF_BINARY] + list(args)
    shown = " ".join([CF_BINARY] + redact(args))
    logger.debug(f"Running command '{shown}'")

    try:
        if quiet:
            proc = subprocess.run(
                cmd, capture_output=True, encoding="utf-8", timeout=timeout
            )
        else:
            proc = subprocess.run(
                cmd, stdout=None, stderr=subprocess.PIPE, encoding="utf-8", timeout=timeout
            )
    except FileNotFoundError:
        raise CommandError(f"{CF_BINARY} executable not found", args=args)
    except subprocess.TimeoutExpired:
        raise CommandError(f"'{shown}' timed out after {timeout}s", args=args)

    stdout = proc.stdout or ""
    if proc.returncode != 0:
        message = (proc.stderr or "").strip() or stdout.strip()
        if not message:
            message = f"{shown} failed with exit code {proc.returncode}"
        raise CommandError(message, args=args, returncode=proc.returncode)

    logger.debug(f"Output from '{shown}':\n{stdout}")
    return stdout
