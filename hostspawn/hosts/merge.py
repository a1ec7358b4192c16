# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""
Merge the overrides of a host.create command into EC2 distro settings.

Each rule names the settings it writes, when the request overrides them and
how the new values are computed. Apart from the exceptions below, a rule
applies only when the request has a non-empty value, so that empty request
fields keep the value of the distro:

* block devices of the request are appended to those of the distro;
* the key name is always taken from the request, even when empty: a spawned
  host never inherits the key pair of the distro.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from hostspawn.distros.providers import EC2ProviderSettings, MountPoint
from hostspawn.tasks.models import HostCreationRequest


OverrideValues = Callable[
    [EC2ProviderSettings, HostCreationRequest], dict[str, Any]
]


@dataclass(frozen=True)
class OverrideRule:
    """How a request overrides some of the settings of a distro."""

    #: Settings fields written by the rule
    fields: tuple[str, ...]
    #: Whether the request overrides the fields
    applies: Callable[[HostCreationRequest], bool]
    #: New values of the fields
    values: OverrideValues


def _non_empty(attribute: str) -> Callable[[HostCreationRequest], bool]:
    return lambda request: bool(getattr(request, attribute))


def _copy(field: str, attribute: str) -> OverrideValues:
    return lambda settings, request: {field: getattr(request, attribute)}


def _replace(field: str, attribute: str | None = None) -> OverrideRule:
    """Rule replacing field with a non-empty request attribute."""
    attribute = attribute or field
    return OverrideRule(
        fields=(field,),
        applies=_non_empty(attribute),
        values=_copy(field, attribute),
    )


def _append_mount_points(
    settings: EC2ProviderSettings, request: HostCreationRequest
) -> dict[str, Any]:
    return {
        "mount_points": [
            *settings.mount_points,
            *(
                MountPoint(
                    device_name=device.device_name,
                    size=device.ebs_size,
                    iops=device.ebs_iops,
                    snapshot_id=device.ebs_snapshot_id,
                )
                for device in request.ebs_block_device
            ),
        ]
    }


EC2_OVERRIDE_RULES: tuple[OverrideRule, ...] = (
    _replace("ami"),
    OverrideRule(
        fields=("aws_access_key_id", "aws_secret_access_key"),
        applies=_non_empty("aws_access_key_id"),
        values=lambda settings, request: {
            "aws_access_key_id": request.aws_access_key_id,
            "aws_secret_access_key": request.aws_secret_access_key,
        },
    ),
    OverrideRule(
        fields=("mount_points",),
        applies=_non_empty("ebs_block_device"),
        values=_append_mount_points,
    ),
    _replace("instance_type"),
    OverrideRule(
        fields=("key_name",),
        applies=lambda request: True,
        values=_copy("key_name", "key_name"),
    ),
    _replace("region"),
    _replace("security_group_ids"),
    _replace("subnet_id"),
    _replace("user_data", "userdata_command"),
    _replace("vpc_name", "vpc_id"),
)


def merge_ec2_settings(
    settings: EC2ProviderSettings,
    request: HostCreationRequest,
    rules: Sequence[OverrideRule] = EC2_OVERRIDE_RULES,
) -> EC2ProviderSettings:
    """Return a copy of settings with the overrides of request applied."""
    merged = settings.copy(deep=True)
    for rule in rules:
        if rule.applies(request):
            values = rule.values(merged, request)
            for field in rule.fields:
                setattr(merged, field, values[field])
    return merged
