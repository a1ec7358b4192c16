# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""Distros: host templates, their providers and container pools."""

from hostspawn.distros.models import (
    ContainerPool,
    Distro,
    Expansion,
    distro_ids,
)
from hostspawn.distros.names import generate_name
from hostspawn.distros.providers import (
    DockerProviderSettings,
    EC2ProviderSettings,
    GCEProviderSettings,
    MockProviderSettings,
    MountPoint,
    OpenStackProviderSettings,
    ProviderName,
    ProviderSettings,
    SPAWNABLE_PROVIDERS,
    StaticHost,
    StaticProviderSettings,
    VSphereProviderSettings,
    provider_settings_model,
)

__all__ = [
    "ContainerPool",
    "Distro",
    "DockerProviderSettings",
    "EC2ProviderSettings",
    "Expansion",
    "GCEProviderSettings",
    "MockProviderSettings",
    "MountPoint",
    "OpenStackProviderSettings",
    "ProviderName",
    "ProviderSettings",
    "SPAWNABLE_PROVIDERS",
    "StaticHost",
    "StaticProviderSettings",
    "VSphereProviderSettings",
    "distro_ids",
    "generate_name",
    "provider_settings_model",
]
