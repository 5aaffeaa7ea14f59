"""Tests for SyncService connection handling."""

import pytest

from sshsync.core.exceptions import AuthError, CommandFailed, ConfigError, NetworkError
from sshsync.domain.sync import SyncConfig, SyncService

from conftest import FakeConnectionFactory, make_tree

PARAMS = {"host": "web1", "user": "deploy", "port": 22, "password": "pw"}


class TestSyncService:

    def test_sync_connects_and_closes(self, tmp_path, remote):
        root = make_tree(tmp_path / "src", {"a/f.txt": b"f"})
        connected = []
        reports = []
        service = SyncService(
            FakeConnectionFactory(remote),
            on_connected=lambda host, port: connected.append((host, port)),
            on_complete=reports.append,
        )

        report = service.sync(PARAMS, root, "/srv/app", SyncConfig(poll_interval=0.001))

        assert report.files_copied == 1
        assert reports == [report]
        assert connected == [("web1", 22)]
        assert remote.closed

    def test_remote_tilde_resolved(self, tmp_path, remote):
        root = make_tree(tmp_path / "src", {"f.txt": b"f"})
        SyncService(FakeConnectionFactory(remote)).sync(
            PARAMS, root, "~/app", SyncConfig(poll_interval=0.001)
        )
        assert remote.files == {"/home/tester/app/f.txt": b"f"}

    def test_closes_on_failure(self, tmp_path, remote):
        root = make_tree(tmp_path / "src", {"f.txt": b"f"})
        remote.failing_mkdirs.add("/srv/app")
        with pytest.raises(Exception):
            SyncService(FakeConnectionFactory(remote)).sync(
                PARAMS, root, "/srv/app", SyncConfig(poll_interval=0.001)
            )
        assert remote.closed

    def test_key_falls_back_to_password(self, remote):
        """A rejected key is retried once without it when a password is set."""
        factory = FakeConnectionFactory(remote, error=AuthError("key rejected"))
        remote.responses["true"] = (b"", b"", 0)
        SyncService(factory).execute({**PARAMS, "key": "/k"}, "true")
        assert len(factory.calls) == 2
        assert "key" not in factory.calls[1]

    def test_unreadable_key_falls_back_to_password(self, remote):
        """A key file that cannot be loaded still lets the password be tried."""
        factory = FakeConnectionFactory(remote, error=ConfigError("Failed to load private key at /k"))
        remote.responses["true"] = (b"", b"", 0)
        SyncService(factory).execute({**PARAMS, "key": "/k"}, "true")
        assert len(factory.calls) == 2
        assert "key" not in factory.calls[1]
        assert factory.calls[1]["password"] == "pw"

    def test_key_failure_without_password(self, remote):
        factory = FakeConnectionFactory(remote, error=AuthError("key rejected"))
        params = {"host": "web1", "user": "deploy", "key": "/k"}
        with pytest.raises(AuthError):
            SyncService(factory).execute(params, "true")
        assert len(factory.calls) == 1

    def test_network_error_not_retried(self, remote):
        factory = FakeConnectionFactory(remote, error=NetworkError("unreachable"))
        with pytest.raises(NetworkError):
            SyncService(factory).execute({**PARAMS, "key": "/k"}, "true")
        assert len(factory.calls) == 1

    def test_execute_failure(self, remote):
        remote.responses["false"] = (b"", b"nope", 1)
        with pytest.raises(CommandFailed):
            SyncService(FakeConnectionFactory(remote)).execute(PARAMS, "false")
        assert remote.closed
