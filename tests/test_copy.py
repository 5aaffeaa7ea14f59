"""Tests for single file upload."""

import threading

import pytest

from sshsync.core.exceptions import Cancelled, LocalIOError, RemoteIOError, TransportError
from sshsync.domain.transfer import copy_file


@pytest.fixture
def remote_tmp(remote):
    remote.dirs.add("/tmp")
    return remote


class TestCopyFile:
    """copy_file streams local bytes into a remote file."""

    def test_copies_content(self, tmp_path, remote_tmp):
        src = tmp_path / "data.bin"
        src.write_bytes(b"x" * 100_000)
        copied = copy_file(remote_tmp, src, "/tmp/data.bin", chunk_size=4096)
        assert copied == 100_000
        assert remote_tmp.files["/tmp/data.bin"] == b"x" * 100_000

    def test_zero_length_file(self, tmp_path, remote_tmp):
        """An empty source still creates the remote file."""
        src = tmp_path / "empty"
        src.write_bytes(b"")
        assert copy_file(remote_tmp, src, "/tmp/empty") == 0
        assert remote_tmp.files["/tmp/empty"] == b""

    def test_overwrites_existing(self, tmp_path, remote_tmp):
        remote_tmp.files["/tmp/f"] = b"old contents that are longer"
        src = tmp_path / "f"
        src.write_bytes(b"new")
        copy_file(remote_tmp, src, "/tmp/f")
        assert remote_tmp.files["/tmp/f"] == b"new"

    def test_progress_callback(self, tmp_path, remote_tmp):
        src = tmp_path / "f"
        src.write_bytes(b"abcdefghij")
        chunks = []
        copy_file(remote_tmp, src, "/tmp/f", chunk_size=4, progress_callback=chunks.append)
        assert chunks == [4, 4, 2]

    def test_missing_local_file(self, tmp_path, remote_tmp):
        with pytest.raises(LocalIOError):
            copy_file(remote_tmp, tmp_path / "nope", "/tmp/nope")
        assert remote_tmp.opened_files() == []

    def test_missing_remote_parent(self, tmp_path, remote_tmp):
        src = tmp_path / "f"
        src.write_bytes(b"data")
        with pytest.raises(RemoteIOError):
            copy_file(remote_tmp, src, "/nonexistent/f")

    def test_write_oserror_is_remote_io_error(self, tmp_path, remote_tmp):
        """SFTP status errors surface as OSError from paramiko."""
        remote_tmp.write_errors["/tmp/f"] = OSError("Permission denied")
        src = tmp_path / "f"
        src.write_bytes(b"data")
        with pytest.raises(RemoteIOError):
            copy_file(remote_tmp, src, "/tmp/f")

    def test_dropped_connection_is_transport_error(self, tmp_path, remote_tmp, ssh_error):
        remote_tmp.write_errors["/tmp/f"] = ssh_error
        src = tmp_path / "f"
        src.write_bytes(b"data")
        with pytest.raises(TransportError):
            copy_file(remote_tmp, src, "/tmp/f")

    def test_eof_is_transport_error(self, tmp_path, remote_tmp):
        remote_tmp.write_errors["/tmp/f"] = EOFError()
        src = tmp_path / "f"
        src.write_bytes(b"data")
        with pytest.raises(TransportError):
            copy_file(remote_tmp, src, "/tmp/f")

    def test_cancelled_before_first_chunk(self, tmp_path, remote_tmp):
        src = tmp_path / "f"
        src.write_bytes(b"data")
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(Cancelled):
            copy_file(remote_tmp, src, "/tmp/f", cancel_event=cancel)

    def test_session_released(self, tmp_path, remote_tmp):
        remote_tmp.write_errors["/tmp/f"] = OSError("disk full")
        src = tmp_path / "f"
        src.write_bytes(b"data")
        with pytest.raises(RemoteIOError):
            copy_file(remote_tmp, src, "/tmp/f")
        assert remote_tmp.open_sessions == 0
