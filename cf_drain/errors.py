#!/usr/bin/env python3


class DrainError(Exception):
    """Base for every failure that aborts a drain command.

    ``str(error)`` is the single diagnostic line shown to the user.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UsageError(DrainError):
    pass


class ParseError(DrainError):
    pass


class UnknownSourceError(DrainError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f'unknown application or service "{name}"')


class CommandError(DrainError):
    """A cf command or session lookup failed; message is passed through."""

    def __init__(self, message: str, args=None, returncode: int = None):
        self.command = args
        self.returncode = returncode
        super().__init__(message)


class CredentialError(DrainError):
    pass


class DownloadError(DrainError):
    pass
