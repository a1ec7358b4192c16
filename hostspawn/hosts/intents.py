# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""
Turn host.create commands into host intents.

Hosts are requested either by a running task, in which case they belong to
the task and are torn down after a timeout, or by a user on behalf of a task,
in which case they belong to the user.
"""

import logging
import random
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from hostspawn.config import ProvisioningSettings
from hostspawn.db.interface import DatabaseInterface
from hostspawn.db.models import Task, User
from hostspawn.distros.models import Distro
from hostspawn.distros.providers import (
    EC2ProviderSettings,
    ProviderName,
    provider_settings_model,
)
from hostspawn.exceptions import (
    ConfigurationError,
    InvalidInputError,
    NotFoundError,
    PersistenceError,
)
from hostspawn.hosts.merge import merge_ec2_settings
from hostspawn.hosts.models import (
    HostIntent,
    ProvisionOptions,
    SpawnOptions,
    TaskOwnership,
    UserOwnership,
    new_intent,
)
from hostspawn.tasks.commands import extract_create_host_requests
from hostspawn.tasks.models import HostCreationRequest, SpawnScope

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Return the current time, in UTC."""
    return datetime.now(timezone.utc)


def authorized_key_setup(public_key: str, user: str) -> str:
    """Return a setup script fragment authorizing public_key for user."""
    return f'\necho "\n{public_key}" >> ~{user}/.ssh/authorized_keys\n'


class HostIntentBuilder:
    """Build and store host intents for the host.create commands of tasks."""

    def __init__(
        self,
        db: DatabaseInterface,
        *,
        settings: ProvisioningSettings | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize the builder.

        :param db: database to read distros and tasks from, and to store
          the new hosts in.
        :param settings: provisioning settings, defaults to the default
          settings.
        :param rng: random source for host names, defaults to a shared
          system-seeded one.
        :param clock: function returning the current time.
        """
        self.db = db
        self.settings = settings or ProvisioningSettings()
        self.rng = rng
        self.clock = clock

    def create_hosts_for_user(
        self, task_id: str, username: str, key_name_or_value: str
    ) -> list[HostIntent]:
        """Create the hosts of task task_id on behalf of username."""
        task = self.db.get_task(task_id)
        user = self.db.get_user(username)
        return self.create_hosts_from_task(task, user, key_name_or_value)

    def create_hosts_from_task(
        self,
        task: Task | None,
        user: User | None,
        key_name_or_value: str,
    ) -> list[HostIntent]:
        """
        Create hosts for all the host.create commands of task.

        :param task: task whose configuration contains the commands.
        :param user: user requesting the hosts, or None if the task itself
          requested them.
        :param key_name_or_value: name of a public key of user, or the public
          key itself.
        :raises InvalidInputError: if task is None.
        :raises ConfigurationError: if the configuration of task cannot be
          found, or a distro has invalid settings.
        :raises DecodeError: if the parameters of a command are invalid; no
          host is created in that case.
        :raises PersistenceError: if storing the hosts failed.
        """
        if task is None:
            raise InvalidInputError("no task to create hosts from")

        public_key = key_name_or_value
        if user is not None:
            try:
                public_key = user.get_public_key(key_name_or_value)
            except NotFoundError:
                logger.debug(
                    "Using %r as a literal public key for user %s",
                    key_name_or_value,
                    user.username,
                )

        task_config = self.db.make_task_config(task)
        project_task = task_config.project.find_project_task(
            task_config.task.display_name
        )
        if project_task is None:
            raise ConfigurationError(
                f"unable to find configuration for task {task_config.task.id}"
            )

        requests = extract_create_host_requests(project_task)

        user_id = user.username if user is not None else ""
        hosts = [
            self.make_intent_host(task.id, user_id, public_key, request)
            for request in requests
            for _ in range(request.num_hosts)
        ]

        try:
            self.db.insert_hosts(hosts)
        except PersistenceError:
            logger.exception(
                "Error inserting %d hosts for task %s", len(hosts), task.id
            )
            raise

        logger.info("Created %d hosts for task %s", len(hosts), task.id)
        return hosts

    def _load_template(
        self, distro_id: str, provider: ProviderName
    ) -> tuple[Distro, EC2ProviderSettings]:
        """Return the distro to start from and its settings for provider."""
        if not distro_id:
            return Distro(), EC2ProviderSettings()

        distro = self.db.get_distro(distro_id).copy(deep=True)
        settings = provider_settings_model(provider, distro.provider_settings)
        assert isinstance(settings, EC2ProviderSettings)
        return distro, settings

    def make_intent_host(
        self,
        task_id: str,
        user_id: str,
        public_key: str,
        request: HostCreationRequest,
    ) -> HostIntent:
        """
        Build the intent for one host requested by task_id.

        :param user_id: user requesting the host, or "" if the task itself
          requested it.
        :param public_key: public key to authorize on the host, if any.
        :raises NotFoundError: if the distro of the request, or the task of a
          build-scoped request, does not exist.
        :raises ConfigurationError: if the settings of the distro are
          invalid for EC2, including settings with keys EC2 does not use,
          such as those of a docker distro.
        """
        if request.spot:
            provider = ProviderName.EC2_SPOT
        else:
            provider = ProviderName.EC2_ON_DEMAND

        distro, settings = self._load_template(request.distro, provider)

        distro.provider = provider

        if public_key:
            distro.setup += authorized_key_setup(public_key, distro.user)

        distro.set_provider_settings(merge_ec2_settings(settings, request))

        now = self.clock()
        if user_id:
            ownership: UserOwnership | TaskOwnership = UserOwnership(
                user_name=user_id,
                provision_options=ProvisionOptions(
                    load_cli=True, task_id=task_id, owner_id=user_id
                ),
            )
        else:
            ownership = TaskOwnership(
                task_id=task_id,
                spawn_options=self._spawn_options(task_id, request, now),
            )

        name = distro.generate_name(
            rng=self.rng, now=now, time_format=self.settings.name_time_format
        )
        logger.debug(
            "Host %s requested by task %s: provider %s, distro %r, owner %s",
            name,
            task_id,
            provider,
            request.distro,
            user_id or task_id,
        )
        return new_intent(distro, name, provider, ownership, now)

    def _spawn_options(
        self, task_id: str, request: HostCreationRequest, now: datetime
    ) -> SpawnOptions:
        """Return the lifecycle of a host spawned by task_id."""
        build_id = ""
        scoped_task_id = ""
        match request.scope:
            case SpawnScope.BUILD:
                build_id = self.db.get_task(task_id).build_id
            case SpawnScope.TASK:
                scoped_task_id = task_id

        return SpawnOptions(
            task_id=scoped_task_id,
            build_id=build_id,
            timeout_setup=now + timedelta(seconds=request.timeout_setup_secs),
            timeout_teardown=(
                now + timedelta(seconds=request.timeout_teardown_secs)
            ),
            retries=request.retries,
            spawned_by_task=True,
        )
