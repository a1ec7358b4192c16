# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""Display statuses of tasks."""

import json
from collections.abc import Iterable

try:
    import pydantic.v1 as pydantic
except ImportError:
    import pydantic as pydantic  # type: ignore

from hostspawn.db.models import Task, TaskStatus

#: Description of the end details of a task that stopped sending heartbeats
HEARTBEAT_TIMEOUT = "heartbeat"

#: Type of the end details of a task that failed because of the system
SYSTEM_FAILURE = "system"


def result_status(task: Task) -> TaskStatus:
    """
    Return the status of task to display to users.

    This combines the raw status of the task with the details of how it
    ended.
    """
    match task.status:
        case TaskStatus.UNDISPATCHED:
            if not task.activated:
                return TaskStatus.INACTIVE
            return TaskStatus.UNSTARTED
        case TaskStatus.FAILED:
            details = task.details
            if details.type == SYSTEM_FAILURE:
                if not details.timed_out:
                    return TaskStatus.SYSTEM_FAILED
                if details.description == HEARTBEAT_TIMEOUT:
                    return TaskStatus.SYSTEM_UNRESPONSIVE
                if task.has_failed_tests():
                    return TaskStatus.FAILED
                return TaskStatus.SYSTEM_TIMED_OUT
            if details.timed_out:
                return TaskStatus.TEST_TIMED_OUT
            return TaskStatus.FAILED
        case _:
            return task.status


class ResultCounts(pydantic.BaseModel):
    """Number of tasks in each display status."""

    total: int = 0
    inactive: int = 0
    unstarted: int = 0
    started: int = 0
    succeeded: int = 0
    failed: int = 0
    system_failed: int = 0
    system_unresponsive: int = 0
    system_timed_out: int = 0
    test_timed_out: int = 0

    class Config:
        """Serialize with the names of the display statuses."""

        alias_generator = lambda name: name.replace("_", "-")  # noqa: E731
        allow_population_by_field_name = True

    @property
    def loggable(self) -> bool:
        """Return True if there is anything to log."""
        return self.total > 0

    def __str__(self) -> str:
        """Return the counters as JSON, or "" if there is nothing to log."""
        if not self.loggable:
            return ""
        return json.dumps(self.dict(by_alias=True))


_counters: dict[TaskStatus, str] = {
    TaskStatus.INACTIVE: "inactive",
    TaskStatus.UNSTARTED: "unstarted",
    TaskStatus.STARTED: "started",
    TaskStatus.SUCCEEDED: "succeeded",
    TaskStatus.FAILED: "failed",
    TaskStatus.SYSTEM_FAILED: "system_failed",
    TaskStatus.SYSTEM_UNRESPONSIVE: "system_unresponsive",
    TaskStatus.SYSTEM_TIMED_OUT: "system_timed_out",
    TaskStatus.TEST_TIMED_OUT: "test_timed_out",
}


def get_result_counts(tasks: Iterable[Task]) -> ResultCounts:
    """Count tasks by their display status."""
    counts = ResultCounts()
    for task in tasks:
        counts.total += 1
        if (counter := _counters.get(result_status(task))) is not None:
            setattr(counts, counter, getattr(counts, counter) + 1)
    return counts
