# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""Models for the data of host.create commands."""

from enum import StrEnum
from typing import Any

try:
    import pydantic.v1 as pydantic
except ImportError:
    import pydantic as pydantic  # type: ignore

#: Default number of seconds a spawned host has to finish its setup
DEFAULT_SETUP_TIMEOUT_SECS = 600

#: Default number of seconds before a spawned host is torn down
DEFAULT_TEARDOWN_TIMEOUT_SECS = 21600


class BaseTaskDataModel(pydantic.BaseModel):
    """Stricter pydantic defaults for task data models."""

    class Config:
        """Set up stricter pydantic Config."""

        validate_assignment = True
        extra = pydantic.Extra.forbid

    def dict(self, **kwargs: Any) -> dict[str, Any]:
        """Use aliases by default when serializing."""
        kwargs.setdefault("by_alias", True)
        return super().dict(**kwargs)


class SpawnScope(StrEnum):
    """What the lifetime of a host spawned by a task is tied to."""

    BUILD = "build"
    TASK = "task"


class EbsDevice(BaseTaskDataModel):
    """EBS block device to attach to a spawned host."""

    device_name: pydantic.StrictStr
    ebs_size: pydantic.conint(strict=True, ge=0) = 0
    ebs_iops: pydantic.conint(strict=True, ge=0) = 0
    ebs_snapshot_id: pydantic.StrictStr = ""


class HostCreationRequest(BaseTaskDataModel):
    """
    Parameters of a host.create command.

    Values are not coerced: a parameter of the wrong type is an error.
    Empty values mean "use the value from the distro", except for
    ``key_name`` which is never inherited from the distro.
    """

    num_hosts: pydantic.conint(strict=True, ge=0) = 1
    distro: pydantic.StrictStr = ""
    spot: pydantic.StrictBool = False

    # EC2 settings:
    ami: pydantic.StrictStr = ""
    aws_access_key_id: pydantic.StrictStr = ""
    aws_secret_access_key: pydantic.StrictStr = ""
    ebs_block_device: list[EbsDevice] = []
    instance_type: pydantic.StrictStr = ""
    key_name: pydantic.StrictStr = ""
    region: pydantic.StrictStr = ""
    security_group_ids: list[pydantic.StrictStr] = []
    subnet_id: pydantic.StrictStr = ""
    userdata_command: pydantic.StrictStr = ""
    vpc_id: pydantic.StrictStr = ""

    # Lifecycle:
    scope: SpawnScope = SpawnScope.TASK
    timeout_setup_secs: pydantic.conint(strict=True, ge=0) = DEFAULT_SETUP_TIMEOUT_SECS
    timeout_teardown_secs: pydantic.conint(strict=True, ge=0) = DEFAULT_TEARDOWN_TIMEOUT_SECS
    retries: pydantic.conint(strict=True, ge=0) = 0
