# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""Providers and their provider-specific distro settings."""

import abc
from collections.abc import Collection
from enum import StrEnum
from typing import Any

try:
    import pydantic.v1 as pydantic
except ImportError:
    import pydantic as pydantic  # type: ignore

from hostspawn.exceptions import ConfigurationError


class ProviderName(StrEnum):
    """Backends able to realize a host."""

    STATIC = "static"
    DOCKER = "docker"
    DOCKER_MOCK = "docker-mock"
    EC2_ON_DEMAND = "ec2-ondemand"
    EC2_SPOT = "ec2-spot"
    GCE = "gce"
    OPENSTACK = "openstack"
    VSPHERE = "vsphere"
    MOCK = "mock"


#: Providers that create hosts on demand, as opposed to statically
#: registered hosts
SPAWNABLE_PROVIDERS = frozenset(
    {
        ProviderName.EC2_ON_DEMAND,
        ProviderName.EC2_SPOT,
        ProviderName.DOCKER,
        ProviderName.GCE,
        ProviderName.OPENSTACK,
        ProviderName.VSPHERE,
        ProviderName.MOCK,
    }
)


class BaseDistroDataModel(pydantic.BaseModel, abc.ABC):
    """Base pydantic model for distro configuration."""

    class Config:
        """Set up stricter pydantic Config."""

        validate_assignment = True
        extra = pydantic.Extra.forbid


_provider_settings_models: dict[ProviderName, type["ProviderSettings"]] = {}


class ProviderSettings(BaseDistroDataModel, abc.ABC):
    """Base class for the provider settings stored in a distro."""

    def __init_subclass__(
        cls,
        providers: Collection[ProviderName],
        **kwargs: Any,
    ) -> None:
        """Register subclass in _provider_settings_models."""
        super().__init_subclass__(**kwargs)
        for provider in providers:
            _provider_settings_models[provider] = cls


def provider_settings_class(
    provider: ProviderName | str,
) -> type[ProviderSettings]:
    """Return the ProviderSettings subclass used by provider."""
    try:
        return _provider_settings_models[ProviderName(provider)]
    except ValueError:
        raise ConfigurationError(f"Unknown provider {provider!r}")


def provider_settings_model(
    provider: ProviderName | str, data: dict[str, Any] | None
) -> ProviderSettings:
    """
    Decode the settings of a distro for provider.

    :raises ConfigurationError: if the provider is unknown or the settings do
      not match the schema of the provider.
    """
    model = provider_settings_class(provider)
    try:
        return model.parse_obj(data or {})
    except pydantic.ValidationError as exc:
        raise ConfigurationError(
            f"Invalid settings for provider {provider}: {exc}", exc
        ) from exc


# Amazon EC2:


class MountPoint(BaseDistroDataModel):
    """Block device attached to an EC2 instance."""

    device_name: str = ""
    virtual_name: str = ""
    # In GiB:
    size: int = 0
    iops: int = 0
    snapshot_id: str = ""


class EC2ProviderSettings(
    ProviderSettings,
    providers=(ProviderName.EC2_ON_DEMAND, ProviderName.EC2_SPOT),
):
    """Settings for EC2 on-demand and spot instances."""

    ami: str = ""
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    instance_type: str = ""
    ipv6: bool = False
    key_name: str = ""
    mount_points: list[MountPoint] = []
    region: str = ""
    security_group_ids: list[str] = []
    subnet_id: str = ""
    is_vpc: bool = False
    vpc_name: str = ""
    user_data: str = ""
    # Spot:
    bid_price: float = 0.0


# Google Compute Engine:


class GCEProviderSettings(ProviderSettings, providers=(ProviderName.GCE,)):
    """Settings for Google Compute Engine instances."""

    zone: str = ""
    image_name: str = ""
    image_family: str = ""
    instance_type: str = ""
    num_cpus: int = 0
    memory_mb: int = 0
    disk_type: str = ""
    disk_size_gb: int = 0
    network_tags: list[str] = []


# Containers:


class DockerProviderSettings(
    ProviderSettings,
    providers=(ProviderName.DOCKER, ProviderName.DOCKER_MOCK),
):
    """Settings for container hosts."""

    image_url: str = ""


# Statically registered hosts:


class StaticHost(BaseDistroDataModel):
    """A statically registered host."""

    name: str


class StaticProviderSettings(
    ProviderSettings, providers=(ProviderName.STATIC,)
):
    """Settings for statically registered hosts."""

    hosts: list[StaticHost] = []


# Other clouds:


class OpenStackProviderSettings(
    ProviderSettings, providers=(ProviderName.OPENSTACK,)
):
    """Settings for OpenStack instances."""

    image_name: str = ""
    flavor_name: str = ""
    key_name: str = ""
    security_group: str = ""


class VSphereProviderSettings(
    ProviderSettings, providers=(ProviderName.VSPHERE,)
):
    """Settings for vSphere virtual machines."""

    template: str = ""
    datastore: str = ""
    resource_pool: str = ""
    num_cpus: int = 0
    memory_mb: int = 0


class MockProviderSettings(ProviderSettings, providers=(ProviderName.MOCK,)):
    """Settings for the mock provider used in tests."""
