# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""Structural checks on container pool configuration."""

import logging
from collections.abc import Iterable

from hostspawn.db.interface import DistroDatabaseInterface
from hostspawn.distros.models import ContainerPool
from hostspawn.exceptions import ContainerPoolValidationError, HostSpawnError

logger = logging.getLogger(__name__)


def validate_container_pool_distros(
    pools: Iterable[ContainerPool], distros: DistroDatabaseInterface
) -> None:
    """
    Ensure that container pools are backed by valid distros.

    The parent distro of a pool must exist and must not itself run in a
    container pool. Every pool is checked, so that all misconfigurations are
    reported at once.

    :raises ContainerPoolValidationError: listing every invalid pool.
    """
    errors: list[str] = []

    for pool in pools:
        try:
            distro = distros.get_distro(pool.distro)
        except HostSpawnError as exc:
            logger.debug(
                "Cannot find distro %s of container pool %s: %s",
                pool.distro,
                pool.id,
                exc,
            )
            errors.append(f"error finding distro for container pool {pool.id}")
            continue

        if distro.container_pool:
            errors.append(f"container pool {pool.id} has invalid distro")

    if errors:
        logger.warning("Invalid container pools: %s", "; ".join(errors))
        raise ContainerPoolValidationError(errors)
