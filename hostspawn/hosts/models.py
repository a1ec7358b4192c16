# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""Models for host intents: hosts that have been requested but not created."""

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal, Union

try:
    import pydantic.v1 as pydantic
except ImportError:
    import pydantic as pydantic  # type: ignore

from hostspawn.distros.models import Distro
from hostspawn.distros.providers import ProviderName


class BaseHostDataModel(pydantic.BaseModel):
    """Base pydantic model for host data."""

    class Config:
        """Set up stricter pydantic Config."""

        validate_assignment = True
        extra = pydantic.Extra.forbid


class HostStatus(StrEnum):
    """Lifecycle status of a host."""

    UNINITIALIZED = "initializing"
    BUILDING = "building"
    STARTING = "starting"
    PROVISIONING = "provisioning"
    RUNNING = "running"
    DECOMMISSIONED = "decommissioned"
    TERMINATED = "terminated"


class OwnershipKind(StrEnum):
    """Who a spawned host belongs to."""

    USER = "user"
    TASK = "task"


class ProvisionOptions(BaseHostDataModel):
    """How to provision a host spawned for a user."""

    load_cli: bool = True
    task_id: str = ""
    owner_id: str


class SpawnOptions(BaseHostDataModel):
    """Lifecycle of a host spawned by a task."""

    #: Set when the host lives as long as the task
    task_id: str = ""
    #: Set when the host lives as long as the build
    build_id: str = ""
    timeout_setup: datetime
    timeout_teardown: datetime
    retries: int = 0
    spawned_by_task: bool = True


class UserOwnership(BaseHostDataModel):
    """A host owned by the user that requested it."""

    kind: Literal[OwnershipKind.USER] = OwnershipKind.USER
    user_name: str
    provision_options: ProvisionOptions


class TaskOwnership(BaseHostDataModel):
    """A host owned by the task that requested it."""

    kind: Literal[OwnershipKind.TASK] = OwnershipKind.TASK
    task_id: str
    spawn_options: SpawnOptions


Ownership = Annotated[
    Union[UserOwnership, TaskOwnership],
    pydantic.Field(discriminator="kind"),
]


class HostIntent(BaseHostDataModel):
    """
    A host to be created by a cloud provider.

    The distro is a materialized copy of the distro the host was requested
    with: its provider and provider settings already include the overrides
    of the request.
    """

    id: str
    distro: Distro
    provider: ProviderName
    status: HostStatus = HostStatus.UNINITIALIZED
    started_by: str
    creation_time: datetime
    ownership: Ownership

    @property
    def user_host(self) -> bool:
        """Return True if the host belongs to a user."""
        return isinstance(self.ownership, UserOwnership)


def new_intent(
    distro: Distro,
    name: str,
    provider: ProviderName,
    ownership: UserOwnership | TaskOwnership,
    creation_time: datetime,
) -> HostIntent:
    """Return a HostIntent for a new host called name."""
    if isinstance(ownership, UserOwnership):
        started_by = ownership.user_name
    else:
        started_by = ownership.task_id
    return HostIntent(
        id=name,
        distro=distro,
        provider=provider,
        started_by=started_by,
        creation_time=creation_time,
        ownership=ownership,
    )
