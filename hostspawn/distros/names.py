# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""
Generate instance names for spawned hosts.

Names combine the wall clock and a pseudo-random integer: they are unique
enough for operational purposes but not guaranteed to be unique. Truncation
for providers with a length limit makes collisions between names generated
in the same second slightly more likely.
"""

import random
import re
from datetime import datetime, timezone

from hostspawn.distros.providers import ProviderName

#: Sortable timestamp used in instance names
NAME_TIME_FORMAT = "%Y%m%d%H%M%S"

#: Maximum length of an instance name permitted by GCE
GCE_MAX_NAME_LENGTH = 63

STATIC_HOST_NAME = "static"

_gce_disallowed_characters = re.compile(r"[^a-z0-9_-]+")

_random = random.Random()


def random_int(rng: random.Random | None = None) -> int:
    """Return a non-negative 63-bit random integer."""
    return (rng or _random).getrandbits(63)


def sanitize_gce_name(name: str) -> str:
    """Make name acceptable as a GCE instance name."""
    name = _gce_disallowed_characters.sub("", name.lower())
    return name[:GCE_MAX_NAME_LENGTH]


def generate_name(
    distro_id: str,
    provider: ProviderName | str | None,
    *,
    rng: random.Random | None = None,
    now: datetime | None = None,
    time_format: str = NAME_TIME_FORMAT,
) -> str:
    """
    Generate an instance name for a host of distro_id on provider.

    :param rng: random source; tests pass a seeded one to get reproducible
      names.
    :param now: timestamp to embed in the name, defaults to the current time.
    :param time_format: strftime format of the embedded timestamp.
    """
    match provider:
        case ProviderName.STATIC:
            return STATIC_HOST_NAME
        case ProviderName.DOCKER:
            return f"container-{random_int(rng)}"

    if now is None:
        now = datetime.now(timezone.utc)
    name = f"evg-{distro_id}-{now.strftime(time_format)}-{random_int(rng)}"

    if provider == ProviderName.GCE:
        name = sanitize_gce_name(name)

    return name
