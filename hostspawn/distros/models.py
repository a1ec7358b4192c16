# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""Models for distros: reusable host templates."""

import random
from collections.abc import Iterable
from datetime import datetime
from pathlib import PurePosixPath
from typing import Any

from hostspawn.distros.names import NAME_TIME_FORMAT, generate_name
from hostspawn.distros.providers import (
    BaseDistroDataModel,
    ProviderName,
    ProviderSettings,
    SPAWNABLE_PROVIDERS,
    provider_settings_model,
)
from hostspawn.exceptions import ConfigurationError

BINARY_NAME = "evergreen"


class Expansion(BaseDistroDataModel):
    """Template variable available to the setup script of a distro."""

    key: str
    value: str = ""


class ContainerPool(BaseDistroDataModel):
    """Group of containers running on hosts of a parent distro."""

    id: str
    #: ID of the parent distro
    distro: str
    max_containers: int = 0
    port: int = 0


class Distro(BaseDistroDataModel):
    """
    A reusable template for hosts.

    ``provider_settings`` is kept in its stored, provider-independent form;
    use :py:meth:`get_provider_settings` and :py:meth:`set_provider_settings`
    to work with the model of the provider.
    """

    id: str = ""
    arch: str = ""
    work_dir: str = ""
    pool_size: int = 0
    provider: ProviderName | None = None
    provider_settings: dict[str, Any] | None = None

    setup_as_sudo: bool = False
    setup: str = ""
    teardown: str = ""
    user: str = ""
    ssh_key: str = ""
    ssh_options: list[str] = []

    spawn_allowed: bool = False
    #: Order is significant: later expansions may refer to earlier ones
    expansions: list[Expansion] = []
    disabled: bool = False

    container_pool: str = ""

    def generate_name(
        self,
        rng: random.Random | None = None,
        now: datetime | None = None,
        time_format: str = NAME_TIME_FORMAT,
    ) -> str:
        """Generate an instance name for a new host of this distro."""
        return generate_name(
            self.id, self.provider, rng=rng, now=now, time_format=time_format
        )

    def is_windows(self) -> bool:
        """Return True if hosts of this distro run Windows."""
        return "windows" in self.arch

    def is_ephemeral(self) -> bool:
        """Return True if hosts of this distro are spawned on demand."""
        return self.provider in SPAWNABLE_PROVIDERS

    def binary_name(self) -> str:
        """Return the file name of the agent binary for this distro."""
        if self.is_windows():
            return BINARY_NAME + ".exe"
        return BINARY_NAME

    def executable_sub_path(self) -> str:
        """Return the path of the compiled agent, relative to its root."""
        return str(PurePosixPath(self.arch) / self.binary_name())

    def is_parent(self, pools: Iterable[ContainerPool]) -> bool:
        """Return True if this distro backs any of the container pools."""
        return any(pool.distro == self.id for pool in pools)

    def get_provider_settings(self) -> ProviderSettings:
        """
        Decode provider_settings for the provider of this distro.

        :raises ConfigurationError: if the distro has no provider, or the
          settings do not match its schema.
        """
        if self.provider is None:
            raise ConfigurationError(f"Distro {self.id!r} has no provider")
        return provider_settings_model(self.provider, self.provider_settings)

    def set_provider_settings(self, settings: ProviderSettings) -> None:
        """Encode settings into provider_settings."""
        self.provider_settings = settings.dict()


def distro_ids(distros: Iterable[Distro]) -> list[str]:
    """Return the IDs of distros."""
    return [distro.id for distro in distros]
