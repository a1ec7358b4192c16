# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""
Interface to the database used by hostspawn.

Durable storage of distros, tasks, users and hosts belongs to the rest of
the platform. To keep hostspawn independent from any particular storage, we
define an interface that is implemented by the code embedding it.

Implementations raise :py:class:`hostspawn.exceptions.NotFoundError` for
missing entities and :py:class:`hostspawn.exceptions.PersistenceError` when
the storage itself fails.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from hostspawn.db.models import Task, TaskConfig, User
from hostspawn.distros.models import Distro
from hostspawn.hosts.models import HostIntent


class DistroDatabaseInterface(ABC):
    """Read access to distros."""

    @abstractmethod
    def get_distro(self, distro_id: str) -> Distro:
        """Return the distro with the given ID."""


class TaskDatabaseInterface(ABC):
    """Read access to tasks and their configuration."""

    @abstractmethod
    def get_task(self, task_id: str) -> Task:
        """Return the task with the given ID."""

    @abstractmethod
    def make_task_config(self, task: Task) -> TaskConfig:
        """Return the full execution configuration of task."""


class UserDatabaseInterface(ABC):
    """Read access to users."""

    @abstractmethod
    def get_user(self, username: str) -> User:
        """Return the user with the given name."""


class HostDatabaseInterface(ABC):
    """Storage of hosts."""

    @abstractmethod
    def insert_hosts(self, hosts: Sequence[HostIntent]) -> None:
        """
        Store hosts.

        Either all of the hosts are stored, or none of them is.
        """

    @abstractmethod
    def find_hosts_spawned_by_task(self, task_id: str) -> list[HostIntent]:
        """Return the live hosts spawned with a lifetime of task_id."""

    @abstractmethod
    def find_hosts_spawned_by_build(self, build_id: str) -> list[HostIntent]:
        """Return the live hosts spawned with a lifetime of build_id."""


class DatabaseInterface(
    DistroDatabaseInterface,
    TaskDatabaseInterface,
    UserDatabaseInterface,
    HostDatabaseInterface,
    ABC,
):
    """All the database access needed by hostspawn."""
