# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""Implementation of an in-memory database."""

import logging
from collections.abc import Callable, Sequence

from hostspawn.db.interface import DatabaseInterface
from hostspawn.db.models import Project, Task, TaskConfig, User
from hostspawn.distros.models import Distro
from hostspawn.exceptions import NotFoundError, PersistenceError
from hostspawn.hosts.models import (
    HostIntent,
    HostStatus,
    SpawnOptions,
    TaskOwnership,
)

logger = logging.getLogger(__name__)

#: Statuses of hosts that are still alive
LIVE_HOST_STATUSES = frozenset(
    {
        HostStatus.UNINITIALIZED,
        HostStatus.BUILDING,
        HostStatus.STARTING,
        HostStatus.PROVISIONING,
        HostStatus.RUNNING,
    }
)


class MemoryDatabase(DatabaseInterface):
    """
    Database keeping everything in dictionaries.

    Entities are copied on the way in and on the way out, so that callers
    can never modify the stored data in place.
    """

    def __init__(self) -> None:
        """Initialize empty storage."""
        self.distros: dict[str, Distro] = {}
        self.tasks: dict[str, Task] = {}
        self.projects: dict[str, Project] = {}
        self.users: dict[str, User] = {}
        self.hosts: dict[str, HostIntent] = {}

    def add_distro(self, distro: Distro) -> None:
        """Store distro."""
        self.distros[distro.id] = distro.copy(deep=True)

    def add_task(self, task: Task, project: Project | None = None) -> None:
        """Store task, and the project configuration it runs with."""
        self.tasks[task.id] = task.copy(deep=True)
        if project is not None:
            self.projects[task.id] = project.copy(deep=True)

    def add_user(self, user: User) -> None:
        """Store user."""
        self.users[user.username] = user.copy(deep=True)

    def get_distro(self, distro_id: str) -> Distro:
        """Return the distro with the given ID."""
        try:
            return self.distros[distro_id].copy(deep=True)
        except KeyError:
            raise NotFoundError(f"Distro {distro_id!r} not found")

    def get_task(self, task_id: str) -> Task:
        """Return the task with the given ID."""
        try:
            return self.tasks[task_id].copy(deep=True)
        except KeyError:
            raise NotFoundError(f"Task {task_id!r} not found")

    def make_task_config(self, task: Task) -> TaskConfig:
        """Return the full execution configuration of task."""
        try:
            project = self.projects[task.id]
        except KeyError:
            raise NotFoundError(f"No project configuration for task {task.id}")
        return TaskConfig(task=task, project=project.copy(deep=True))

    def get_user(self, username: str) -> User:
        """Return the user with the given name."""
        try:
            return self.users[username].copy(deep=True)
        except KeyError:
            raise NotFoundError(f"User {username!r} not found")

    def insert_hosts(self, hosts: Sequence[HostIntent]) -> None:
        """Store hosts, failing without storing anything on duplicate IDs."""
        ids = [host.id for host in hosts]
        duplicates = sorted(
            {
                host_id
                for host_id in ids
                if host_id in self.hosts or ids.count(host_id) > 1
            }
        )
        if duplicates:
            raise PersistenceError(
                f"Duplicate host IDs: {', '.join(duplicates)}"
            )
        for host in hosts:
            self.hosts[host.id] = host.copy(deep=True)
        logger.debug("Stored %d hosts", len(hosts))

    def _find_spawned_hosts(
        self, matches: Callable[[SpawnOptions], bool]
    ) -> list[HostIntent]:
        return [
            host.copy(deep=True)
            for host in self.hosts.values()
            if isinstance(host.ownership, TaskOwnership)
            and host.ownership.spawn_options.spawned_by_task
            and host.status in LIVE_HOST_STATUSES
            and matches(host.ownership.spawn_options)
        ]

    def find_hosts_spawned_by_task(self, task_id: str) -> list[HostIntent]:
        """Return the live hosts spawned with a lifetime of task_id."""
        if not task_id:
            return []
        return self._find_spawned_hosts(
            lambda options: options.task_id == task_id
        )

    def find_hosts_spawned_by_build(self, build_id: str) -> list[HostIntent]:
        """Return the live hosts spawned with a lifetime of build_id."""
        if not build_id:
            return []
        return self._find_spawned_hosts(
            lambda options: options.build_id == build_id
        )
