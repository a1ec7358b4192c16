# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""
Models of the entities read from the database.

Tasks and users are owned by the rest of the platform: hostspawn only reads
them through :py:mod:`hostspawn.db.interface`.
"""

from enum import StrEnum
from typing import Any

try:
    import pydantic.v1 as pydantic
except ImportError:
    import pydantic as pydantic  # type: ignore

from hostspawn.exceptions import NotFoundError


class BaseDbDataModel(pydantic.BaseModel):
    """Base pydantic model for database entities."""

    class Config:
        """Set up stricter pydantic Config."""

        validate_assignment = True
        extra = pydantic.Extra.forbid


class PublicKey(BaseDbDataModel):
    """Named SSH public key of a user."""

    name: str
    key: str


class User(BaseDbDataModel):
    """A user of the platform."""

    username: str
    public_keys: list[PublicKey] = []

    def get_public_key(self, name: str) -> str:
        """
        Return the public key called name.

        :raises NotFoundError: if the user has no such key.
        """
        for public_key in self.public_keys:
            if public_key.name == name:
                return public_key.key
        raise NotFoundError(
            f"User {self.username} has no public key named {name!r}"
        )


class TaskStatus(StrEnum):
    """Raw and display statuses of a task."""

    UNDISPATCHED = "undispatched"
    INACTIVE = "inactive"
    UNSTARTED = "unstarted"
    STARTED = "started"
    SUCCEEDED = "success"
    FAILED = "failed"
    SYSTEM_FAILED = "system-failed"
    SYSTEM_UNRESPONSIVE = "system-unresponsive"
    SYSTEM_TIMED_OUT = "system-timed-out"
    TEST_TIMED_OUT = "test-timed-out"


#: Status of a failed test
TEST_FAILED = "fail"


class TaskEndDetails(BaseDbDataModel):
    """How a task finished."""

    #: "system" for failures of the infrastructure, "test" otherwise
    type: str = ""
    timed_out: bool = False
    description: str = ""


class TestResult(BaseDbDataModel):
    """Result of a single test run by a task."""

    __test__ = False

    test_file: str
    status: str


class Task(BaseDbDataModel):
    """A task of a build."""

    id: str
    build_id: str = ""
    display_name: str = ""
    status: TaskStatus = TaskStatus.UNDISPATCHED
    activated: bool = False
    details: TaskEndDetails = TaskEndDetails()
    test_results: list[TestResult] = []

    def has_failed_tests(self) -> bool:
        """Return True if any of the tests of the task failed."""
        return any(
            result.status == TEST_FAILED for result in self.test_results
        )


class CommandConfig(BaseDbDataModel):
    """A command in the project configuration of a task."""

    command: str
    params: dict[str, Any] = {}


class ProjectTask(BaseDbDataModel):
    """Definition of a task in a project configuration."""

    name: str
    commands: list[CommandConfig] = []


class Project(BaseDbDataModel):
    """Project configuration."""

    tasks: list[ProjectTask] = []

    def find_project_task(self, name: str) -> ProjectTask | None:
        """Return the task definition called name, if any."""
        for project_task in self.tasks:
            if project_task.name == name:
                return project_task
        return None


class TaskConfig(BaseDbDataModel):
    """Full execution configuration of a task."""

    task: Task
    project: Project
