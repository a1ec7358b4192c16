# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""List the hosts spawned by a task or by its build."""

import logging

from hostspawn.db.interface import DatabaseInterface
from hostspawn.exceptions import HostLookupError, PersistenceError
from hostspawn.hosts.models import HostIntent

logger = logging.getLogger(__name__)


def list_hosts_for_task(
    db: DatabaseInterface, task_id: str
) -> list[HostIntent]:
    """
    List the live hosts spawned for task_id or for its build.

    Hosts scoped to the build come first. Both queries are run even if one
    of them fails.

    :raises NotFoundError: if the task does not exist.
    :raises HostLookupError: listing every query that failed.
    """
    task = db.get_task(task_id)

    errors: list[str] = []
    by_task: list[HostIntent] = []
    by_build: list[HostIntent] = []

    try:
        by_task = db.find_hosts_spawned_by_task(task.id)
    except PersistenceError as exc:
        errors.append(
            f"error finding hosts spawned by task {task.id}: {exc}"
        )

    try:
        by_build = db.find_hosts_spawned_by_build(task.build_id)
    except PersistenceError as exc:
        errors.append(
            f"error finding hosts spawned by build {task.build_id}: {exc}"
        )

    if errors:
        logger.error("Cannot list hosts for task %s: %s", task_id, errors)
        raise HostLookupError(errors)

    return by_build + by_task
