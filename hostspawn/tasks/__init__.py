# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""Task data: host.create commands and task statuses."""

from hostspawn.tasks.commands import (
    CREATE_HOST_COMMAND,
    decode_create_host,
    extract_create_host_requests,
    find_create_host_commands,
)
from hostspawn.tasks.models import (
    EbsDevice,
    HostCreationRequest,
    SpawnScope,
)
from hostspawn.tasks.status import (
    ResultCounts,
    get_result_counts,
    result_status,
)

__all__ = [
    "CREATE_HOST_COMMAND",
    "EbsDevice",
    "HostCreationRequest",
    "ResultCounts",
    "SpawnScope",
    "decode_create_host",
    "extract_create_host_requests",
    "find_create_host_commands",
    "get_result_counts",
    "result_status",
]
