# Copyright © The Hostspawn Developers
# See the AUTHORS file at the top-level directory of this distribution
#
# This file is part of Hostspawn. It is subject to the license terms
# in the LICENSE file found in the top-level directory of this
# distribution. No part of Hostspawn, including this file, may be copied,
# modified, propagated, or distributed except according to the terms
# contained in the LICENSE file.

"""Tests for building host intents."""

import random
from datetime import timedelta
from typing import Any
from unittest import mock

from hostspawn.config import ProvisioningSettings
from hostspawn.db.models import CommandConfig, Project, ProjectTask, Task
from hostspawn.distros.providers import EC2ProviderSettings, ProviderName
from hostspawn.exceptions import (
    ConfigurationError,
    DecodeError,
    InvalidInputError,
    NotFoundError,
    PersistenceError,
)
from hostspawn.hosts.intents import HostIntentBuilder, authorized_key_setup
from hostspawn.hosts.models import (
    HostIntent,
    HostStatus,
    TaskOwnership,
    UserOwnership,
)
from hostspawn.tasks.models import HostCreationRequest, SpawnScope
from hostspawn.test import TestCase


class HostIntentBuilderTests(TestCase):
    """Tests for HostIntentBuilder."""

    def setUp(self) -> None:
        super().setUp()
        self.distro = self.playground.create_distro(
            "d1", user="admin", setup="#!/bin/sh\necho setup"
        )
        self.builder = self.make_builder()

    def make_builder(self, **kwargs: Any) -> HostIntentBuilder:
        """Return a builder with a seeded random source and a fixed clock."""
        kwargs.setdefault("rng", random.Random(0))
        kwargs.setdefault("clock", lambda: self.now)
        return HostIntentBuilder(self.playground.db, **kwargs)

    def create_task(self, *params: dict[str, Any], **kwargs: Any) -> Task:
        """Create task t1 with one host.create command per params."""
        return self.playground.create_task(
            "t1", build_id="b1", host_create_params=params, **kwargs
        )

    def assert_task_owned(
        self, host: HostIntent, *, task_id: str = "", build_id: str = ""
    ) -> TaskOwnership:
        """Check that host belongs to task t1, with the given scope."""
        self.assertFalse(host.user_host)
        ownership = host.ownership
        assert isinstance(ownership, TaskOwnership)
        self.assertEqual(ownership.task_id, "t1")
        self.assertEqual(host.started_by, "t1")
        self.assertEqual(ownership.spawn_options.task_id, task_id)
        self.assertEqual(ownership.spawn_options.build_id, build_id)
        self.assertTrue(ownership.spawn_options.spawned_by_task)
        return ownership

    def test_two_hosts_scoped_to_task(self) -> None:
        task = self.create_task(
            {
                "num_hosts": 2,
                "distro": "d1",
                "scope": "task",
                "timeout_setup_secs": 60,
            }
        )

        hosts = self.builder.create_hosts_from_task(task, None, "")

        self.assertEqual(len(hosts), 2)
        for host in hosts:
            ownership = self.assert_task_owned(host, task_id="t1")
            self.assertEqual(
                ownership.spawn_options.timeout_setup,
                self.now + timedelta(seconds=60),
            )
            self.assertEqual(
                ownership.spawn_options.timeout_teardown,
                self.now + timedelta(seconds=21600),
            )
            self.assertEqual(ownership.spawn_options.retries, 0)
            self.assertEqual(host.status, HostStatus.UNINITIALIZED)
            self.assertEqual(host.provider, ProviderName.EC2_ON_DEMAND)
            self.assertEqual(host.creation_time, self.now)
            self.assertTrue(host.id.startswith("evg-d1-20240305102030-"))
        self.assertNotEqual(hosts[0].id, hosts[1].id)
        self.assertEqual(
            sorted(self.playground.db.hosts), sorted(h.id for h in hosts)
        )

    def test_scoped_to_build(self) -> None:
        task = self.create_task(
            {"distro": "d1", "scope": "build", "retries": 3}
        )

        [host] = self.builder.create_hosts_from_task(task, None, "")

        ownership = self.assert_task_owned(host, build_id="b1")
        self.assertEqual(ownership.spawn_options.retries, 3)

    def test_scoped_to_build_task_not_found(self) -> None:
        with self.assertRaisesRegex(NotFoundError, r"Task 'missing'"):
            self.builder.make_intent_host(
                "missing",
                "",
                "",
                HostCreationRequest(distro="d1", scope=SpawnScope.BUILD),
            )

    def test_user_owned(self) -> None:
        task = self.create_task({"distro": "d1", "num_hosts": 1})
        user = self.playground.create_user(
            "alice", public_keys={"laptop": "ssh-rsa AAAAlaptop"}
        )

        [host] = self.builder.create_hosts_from_task(task, user, "laptop")

        self.assertTrue(host.user_host)
        ownership = host.ownership
        assert isinstance(ownership, UserOwnership)
        self.assertEqual(ownership.user_name, "alice")
        self.assertEqual(host.started_by, "alice")
        self.assertTrue(ownership.provision_options.load_cli)
        self.assertEqual(ownership.provision_options.task_id, "t1")
        self.assertEqual(ownership.provision_options.owner_id, "alice")
        self.assertFalse(hasattr(ownership, "spawn_options"))
        self.assertEqual(
            host.distro.setup,
            "#!/bin/sh\necho setup"
            + authorized_key_setup("ssh-rsa AAAAlaptop", "admin"),
        )

    def test_literal_public_key(self) -> None:
        task = self.create_task({"distro": "d1"})
        user = self.playground.create_user("alice")

        [host] = self.builder.create_hosts_from_task(
            task, user, "ssh-ed25519 AAAAliteral"
        )

        self.assertTrue(
            host.distro.setup.endswith(
                '\necho "\nssh-ed25519 AAAAliteral" >> '
                '~admin/.ssh/authorized_keys\n'
            )
        )

    def test_no_public_key(self) -> None:
        task = self.create_task({"distro": "d1"})

        [host] = self.builder.create_hosts_from_task(task, None, "")

        self.assertEqual(host.distro.setup, "#!/bin/sh\necho setup")

    def test_stored_distro_unchanged(self) -> None:
        task = self.create_task({"distro": "d1", "spot": True, "ami": "ami-2"})

        self.builder.create_hosts_from_task(task, None, "ssh-rsa AAAA")

        self.assertEqual(self.playground.db.get_distro("d1"), self.distro)

    def test_spot(self) -> None:
        task = self.create_task({"distro": "d1", "spot": True})

        [host] = self.builder.create_hosts_from_task(task, None, "")

        self.assertEqual(host.provider, ProviderName.EC2_SPOT)
        self.assertEqual(host.distro.provider, ProviderName.EC2_SPOT)

    def test_provider_overwritten(self) -> None:
        self.playground.create_distro(
            "gce-distro", provider=ProviderName.GCE, provider_settings=None
        )

        host = self.builder.make_intent_host(
            "t1", "", "", HostCreationRequest(distro="gce-distro")
        )

        self.assertEqual(host.distro.id, "gce-distro")
        self.assertEqual(host.distro.provider, ProviderName.EC2_ON_DEMAND)
        self.assertEqual(host.provider, ProviderName.EC2_ON_DEMAND)

    def test_merged_settings(self) -> None:
        host = self.builder.make_intent_host(
            "t1",
            "",
            "",
            HostCreationRequest(
                distro="d1", ami="ami-request", security_group_ids=["sg-1"]
            ),
        )

        self.assertEqual(
            host.distro.get_provider_settings(),
            EC2ProviderSettings(
                ami="ami-request",
                instance_type="m5.large",
                key_name="",
                region="us-east-1",
                security_group_ids=["sg-1"],
                subnet_id="subnet-distro",
            ),
        )

    def test_without_distro(self) -> None:
        host = self.builder.make_intent_host(
            "t1",
            "",
            "",
            HostCreationRequest(
                ami="ami-request", instance_type="t3.micro", key_name="k1"
            ),
        )

        self.assertEqual(host.distro.id, "")
        self.assertEqual(host.distro.provider, ProviderName.EC2_ON_DEMAND)
        self.assertEqual(
            host.distro.get_provider_settings(),
            EC2ProviderSettings(
                ami="ami-request", instance_type="t3.micro", key_name="k1"
            ),
        )
        self.assertTrue(host.id.startswith("evg--20240305102030-"))

    def test_distro_not_found(self) -> None:
        task = self.create_task({"distro": "missing"})

        with self.assertRaises(NotFoundError):
            self.builder.create_hosts_from_task(task, None, "")

        self.assertEqual(self.playground.db.hosts, {})

    def test_distro_with_invalid_settings(self) -> None:
        self.playground.create_distro(
            "docker-distro",
            provider=ProviderName.DOCKER,
            provider_settings={"image_url": "registry/image"},
        )

        with self.assertRaisesRegex(
            ConfigurationError, r"Invalid settings for provider ec2-ondemand"
        ):
            self.builder.make_intent_host(
                "t1", "", "", HostCreationRequest(distro="docker-distro")
            )

    def test_no_task(self) -> None:
        with self.assertRaisesRegex(
            InvalidInputError, r"no task to create hosts from"
        ):
            self.builder.create_hosts_from_task(None, None, "")

    def test_no_project_task(self) -> None:
        task = self.create_task(
            project=Project(tasks=[ProjectTask(name="other")])
        )

        with self.assertRaisesRegex(
            ConfigurationError, r"unable to find configuration for task t1"
        ):
            self.builder.create_hosts_from_task(task, None, "")

    def test_decode_error_creates_nothing(self) -> None:
        task = self.create_task(
            {"distro": "d1", "num_hosts": 2}, {"num_hosts": "many"}
        )

        with self.assertRaises(DecodeError):
            self.builder.create_hosts_from_task(task, None, "")

        self.assertEqual(self.playground.db.hosts, {})

    def test_other_commands_ignored(self) -> None:
        task = self.create_task(
            {"distro": "d1"},
            extra_commands=[
                CommandConfig(command="shell.exec", params={"script": "make"})
            ],
        )

        hosts = self.builder.create_hosts_from_task(task, None, "")

        self.assertEqual(len(hosts), 1)

    def test_zero_hosts(self) -> None:
        task = self.create_task({"distro": "d1", "num_hosts": 0})

        hosts = self.builder.create_hosts_from_task(task, None, "")

        self.assertEqual(hosts, [])
        self.assertEqual(self.playground.db.hosts, {})

    def test_several_commands(self) -> None:
        task = self.create_task(
            {"distro": "d1", "num_hosts": 2},
            {"distro": "d1", "num_hosts": 3, "spot": True},
        )

        with self.assertLogsContains(
            "Created 5 hosts for task t1",
            logger="hostspawn.hosts.intents",
            level="INFO",
        ):
            hosts = self.builder.create_hosts_from_task(task, None, "")

        self.assertEqual(
            [host.provider for host in hosts],
            [ProviderName.EC2_ON_DEMAND] * 2 + [ProviderName.EC2_SPOT] * 3,
        )
        self.assertEqual(len({host.id for host in hosts}), 5)

    def test_insert_failure(self) -> None:
        task = self.create_task({"distro": "d1", "num_hosts": 2})

        with (
            mock.patch.object(
                self.playground.db,
                "insert_hosts",
                side_effect=PersistenceError("database unavailable"),
            ) as insert_hosts,
            self.assertLogsContains(
                "Error inserting 2 hosts for task t1",
                logger="hostspawn.hosts.intents",
                level="ERROR",
            ),
            self.assertRaisesRegex(PersistenceError, "database unavailable"),
        ):
            self.builder.create_hosts_from_task(task, None, "")

        insert_hosts.assert_called_once()
        self.assertEqual(len(insert_hosts.call_args.args[0]), 2)

    def test_reproducible_names(self) -> None:
        request = HostCreationRequest(distro="d1")
        names = [
            self.make_builder(rng=random.Random(3))
            .make_intent_host("t1", "", "", request)
            .id
            for _ in range(2)
        ]
        self.assertEqual(names[0], names[1])

    def test_name_time_format(self) -> None:
        builder = self.make_builder(
            settings=ProvisioningSettings(name_time_format="%Y")
        )

        host = builder.make_intent_host(
            "t1", "", "", HostCreationRequest(distro="d1")
        )

        self.assertRegex(host.id, r"^evg-d1-2024-\d+$")

    def test_create_hosts_for_user(self) -> None:
        self.create_task({"distro": "d1", "num_hosts": 2})
        self.playground.create_user("bob", public_keys={"k": "ssh-rsa BOB"})

        hosts = self.builder.create_hosts_for_user("t1", "bob", "k")

        self.assertEqual(len(hosts), 2)
        self.assertEqual({host.started_by for host in hosts}, {"bob"})
        self.assertIn("ssh-rsa BOB", hosts[0].distro.setup)

    def test_create_hosts_for_unknown_user(self) -> None:
        self.create_task({"distro": "d1"})

        with self.assertRaisesRegex(NotFoundError, r"User 'carol'"):
            self.builder.create_hosts_for_user("t1", "carol", "k")
