# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""Exceptions raised by hostspawn."""

from collections.abc import Sequence


class HostSpawnError(Exception):
    """Base class for all hostspawn errors."""


class NotFoundError(HostSpawnError):
    """A referenced distro, task, user or container pool does not exist."""


class ConfigurationError(HostSpawnError):
    """
    Raised for malformed or structurally invalid configuration.

    This covers provider settings that cannot be decoded or encoded, task
    configurations without a matching project task, and container pools
    backed by pooled distros.
    """

    def __init__(
        self, message: str, original_exception: Exception | None = None
    ) -> None:
        """
        Initialize the ConfigurationError.

        :param message: human-readable message describing the error.
        :param original_exception: the exception that triggered this error,
          if applicable.
        """
        super().__init__(message)
        self.original_exception = original_exception


class DecodeError(HostSpawnError):
    """The parameters of a host.create command have an unexpected shape."""


class PersistenceError(HostSpawnError):
    """The storage collaborator failed."""


class InvalidInputError(HostSpawnError):
    """A required argument was not provided by the caller."""


class _MultipleErrorsMixin:
    """Carry every error found by an operation that does not stop early."""

    errors: list[str]

    def _init_errors(self, title: str, errors: Sequence[str]) -> str:
        self.errors = list(errors)
        return "\n".join([title, *(f"- {error}" for error in self.errors)])


class ContainerPoolValidationError(_MultipleErrorsMixin, ConfigurationError):
    """One or more container pools are backed by an invalid distro."""

    def __init__(self, errors: Sequence[str]) -> None:
        """Initialize with the list of violations found."""
        super().__init__(
            self._init_errors("Invalid container pool configuration:", errors)
        )


class HostLookupError(_MultipleErrorsMixin, PersistenceError):
    """One or more queries for spawned hosts failed."""

    def __init__(self, errors: Sequence[str]) -> None:
        """Initialize with the list of failed queries."""
        super().__init__(
            self._init_errors("Error looking up spawned hosts:", errors)
        )
