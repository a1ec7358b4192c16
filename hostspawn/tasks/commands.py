# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""Extract host.create commands from the configuration of a task."""

import logging
from collections.abc import Iterator
from typing import Any

try:
    import pydantic.v1 as pydantic
except ImportError:
    import pydantic as pydantic  # type: ignore

from hostspawn.db.models import CommandConfig, ProjectTask
from hostspawn.exceptions import DecodeError
from hostspawn.tasks.models import HostCreationRequest

logger = logging.getLogger(__name__)

#: Name of the command asking for hosts to be spawned
CREATE_HOST_COMMAND = "host.create"


def find_create_host_commands(
    project_task: ProjectTask,
) -> Iterator[CommandConfig]:
    """Yield the host.create commands of project_task, in order."""
    for command in project_task.commands:
        if command.command == CREATE_HOST_COMMAND:
            yield command


def decode_create_host(params: dict[str, Any]) -> HostCreationRequest:
    """
    Decode the parameters of a host.create command.

    :raises DecodeError: if params do not describe a valid request.
    """
    try:
        return HostCreationRequest.parse_obj(params)
    except pydantic.ValidationError as exc:
        raise DecodeError(
            f"error decoding {CREATE_HOST_COMMAND} parameters: {exc}"
        ) from exc


def extract_create_host_requests(
    project_task: ProjectTask,
) -> list[HostCreationRequest]:
    """
    Decode all the host.create commands of project_task.

    Decoding stops at the first invalid command: hosts are requested for
    all the commands of a task, or for none of them.

    :raises DecodeError: if any of the commands is invalid.
    """
    requests = [
        decode_create_host(command.params)
        for command in find_create_host_commands(project_task)
    ]
    logger.debug(
        "Task %s has %d %s commands",
        project_task.name,
        len(requests),
        CREATE_HOST_COMMAND,
    )
    return requests
