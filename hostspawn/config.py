# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""Configuration of hostspawn."""

import logging
import os
from collections.abc import Sequence
from configparser import ConfigParser
from pathlib import Path
from typing import NoReturn

try:
    import pydantic.v1 as pydantic
except ImportError:
    import pydantic as pydantic  # type: ignore

from hostspawn.db.interface import DistroDatabaseInterface
from hostspawn.distros.models import ContainerPool, Distro
from hostspawn.distros.names import NAME_TIME_FORMAT
from hostspawn.distros.validation import validate_container_pool_distros
from hostspawn.exceptions import ConfigurationError, NotFoundError

logger = logging.getLogger(__name__)


class ProvisioningSettings(pydantic.BaseModel):
    """Settings shared by everything that provisions hosts."""

    class Config:
        """Set up stricter pydantic Config."""

        validate_assignment = True
        extra = pydantic.Extra.forbid

    container_pools: list[ContainerPool] = []
    #: strftime format of the timestamp in generated host names
    name_time_format: str = NAME_TIME_FORMAT

    @pydantic.validator("container_pools")
    @classmethod
    def validate_unique_pool_ids(
        cls, pools: list[ContainerPool]
    ) -> list[ContainerPool]:
        """Ensure container pool IDs are unique."""
        if len({pool.id for pool in pools}) < len(pools):
            raise ValueError("Container pool IDs must be unique")
        return pools

    def get_container_pool(self, pool_id: str) -> ContainerPool:
        """
        Return the container pool with the given ID.

        :raises NotFoundError: if there is no such pool.
        """
        for pool in self.container_pools:
            if pool.id == pool_id:
                return pool
        raise NotFoundError(f"Container pool {pool_id!r} not found")

    def is_parent_distro(self, distro: Distro) -> bool:
        """Return True if distro backs any of the container pools."""
        return distro.is_parent(self.container_pools)

    def validate_container_pools(
        self, distros: DistroDatabaseInterface
    ) -> None:
        """
        Check that the container pools are backed by valid distros.

        :raises ContainerPoolValidationError: listing every invalid pool.
        """
        validate_container_pool_distros(self.container_pools, distros)


class ConfigHandler(ConfigParser):
    """
    Read hostspawn configuration file (.ini format).

    Each container pool is configured in a ``[container-pool:<id>]`` section
    with the keys ``distro``, ``max-containers`` and ``port``. The optional
    ``[spawn]`` section may set ``name-time-format``.
    """

    default_directories = [
        str(Path.home() / '.config/hostspawn'),
        '/etc/hostspawn',
    ]

    CONTAINER_POOL_PREFIX = "container-pool:"
    SPAWN_SECTION = "spawn"

    def __init__(self, *, directories: Sequence[str] | None = None) -> None:
        """
        Initialize variables and reads the configuration file.

        :param directories: if None the default directories are used
          (~/.config/hostspawn and /etc/hostspawn)
        :raises ConfigurationError: if no configuration file can be read.
        """
        # Values such as name-time-format contain literal % signs
        super().__init__(interpolation=None)

        if directories is None:
            directories = self.default_directories

        self._configuration_directory = self._choose_directory(directories)

        self.active_configuration_file = os.path.join(
            self._configuration_directory, 'config.ini'
        )

        self._read_file_or_fail(self.active_configuration_file)

    def _read_file_or_fail(self, config_filename: str) -> None:
        """Read config_filename or fails."""
        files_read = self.read(config_filename)

        if len(files_read) != 1:
            self._fail(f'Cannot read {config_filename}')

    @staticmethod
    def _fail(message: str) -> NoReturn:
        """
        Log message and raise ConfigurationError.

        :param message: message to be logged as an error
        """
        logger.error(message)
        raise ConfigurationError(message)

    @classmethod
    def _choose_directory(cls, directories: Sequence[str]) -> str:
        for possible_directory in directories:
            if os.path.isdir(possible_directory):
                return possible_directory

        cls._fail(f'Configuration directory cannot be found in: {directories}')

    @property
    def container_pools(self) -> list[ContainerPool]:
        """Return the container pools configured in the file."""
        pools = []
        for section in self.sections():
            if not section.startswith(self.CONTAINER_POOL_PREFIX):
                continue

            pool_id = section.removeprefix(self.CONTAINER_POOL_PREFIX)
            if not self.has_option(section, 'distro'):
                self._fail(
                    f'Missing required key "distro" in section "{section}" '
                    f'of {self.active_configuration_file}'
                )
            try:
                pools.append(
                    ContainerPool(
                        id=pool_id,
                        distro=self.get(section, 'distro'),
                        max_containers=self.getint(
                            section, 'max-containers', fallback=0
                        ),
                        port=self.getint(section, 'port', fallback=0),
                    )
                )
            except (ValueError, pydantic.ValidationError) as exc:
                self._fail(
                    f'Invalid section "{section}" in '
                    f'{self.active_configuration_file}: {exc}'
                )
        return pools

    @property
    def settings(self) -> ProvisioningSettings:
        """Return the settings described by the configuration file."""
        name_time_format = self.get(
            self.SPAWN_SECTION, 'name-time-format', fallback=NAME_TIME_FORMAT
        )
        try:
            return ProvisioningSettings(
                container_pools=self.container_pools,
                name_time_format=name_time_format,
            )
        except pydantic.ValidationError as exc:
            self._fail(
                f'Invalid configuration in '
                f'{self.active_configuration_file}: {exc}'
            )
