"""Shared fixtures: an in-memory remote host behind the SessionProvider interface."""

import posixpath
import shlex
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Set, Tuple

import paramiko
import pytest

from sshsync.core.exceptions import RemoteIOError, TransportError
from sshsync.core.interfaces import SessionProvider


class FakeChannel:
    """Channel double that runs the command against a FakeRemote."""

    def __init__(self, remote: "FakeRemote") -> None:
        self.remote = remote
        self.combine_stderr = False
        self.closed = False
        self._stdout = b""
        self._stderr = b""
        self._exit_code: Optional[int] = None
        self._gate: Optional[threading.Event] = None

    def set_combine_stderr(self, combine: bool) -> None:
        self.combine_stderr = combine

    def exec_command(self, command: str) -> None:
        self.remote.record("exec", command)
        if self.remote.exec_error is not None:
            raise self.remote.exec_error
        stdout, stderr, exit_code = self.remote.handle_command(command)
        if self.combine_stderr:
            stdout, stderr = stdout + stderr, b""
        self._stdout, self._stderr, self._exit_code = stdout, stderr, exit_code
        self._gate = self.remote.command_gates.get(command)

    def recv_ready(self) -> bool:
        return bool(self._stdout)

    def recv(self, size: int) -> bytes:
        data, self._stdout = self._stdout[:size], self._stdout[size:]
        return data

    def recv_stderr_ready(self) -> bool:
        return bool(self._stderr)

    def recv_stderr(self, size: int) -> bytes:
        data, self._stderr = self._stderr[:size], self._stderr[size:]
        return data

    def exit_status_ready(self) -> bool:
        if self._gate is not None and not self._gate.is_set():
            return False
        return self._exit_code is not None

    def recv_exit_status(self) -> int:
        return self._exit_code if self._exit_code is not None else -1

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.remote.release_session()


class FakeRemoteFile:
    """Writable remote file double; content lands in FakeRemote.files on close."""

    def __init__(self, remote: "FakeRemote", path: str) -> None:
        self.remote = remote
        self.path = path
        self.buffer = bytearray()

    def write(self, data: bytes) -> None:
        error = self.remote.write_errors.get(self.path)
        if error is not None:
            raise error
        self.buffer.extend(data)

    def close(self) -> None:
        with self.remote.lock:
            self.remote.files[self.path] = bytes(self.buffer)


class FakeRemote(SessionProvider):
    """
    In-memory remote host.

    Understands ``mkdir -p`` (parsed with shlex, so quoting mistakes show up
    as wrong paths) and ``printf %s "$HOME"``. Every operation is appended to
    ``call_log`` under a lock, in the order it happened.
    """

    home = "/home/tester"

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.dirs: Set[str] = {"/"}
        self.files: Dict[str, bytes] = {}
        self.call_log: List[Tuple[str, str]] = []
        self.responses: Dict[str, Tuple[bytes, bytes, int]] = {}
        self.command_gates: Dict[str, threading.Event] = {}
        self.failing_mkdirs: Set[str] = set()
        self.write_errors: Dict[str, BaseException] = {}
        self.exec_error: Optional[BaseException] = None
        self.on_open: Optional[Callable[[str], None]] = None
        self.open_sessions = 0
        self.max_open_sessions = 0
        self.closed = False

    # --- bookkeeping ---

    def record(self, op: str, arg: str) -> None:
        with self.lock:
            self.call_log.append((op, arg))

    def _acquire_session(self) -> None:
        with self.lock:
            self.open_sessions += 1
            self.max_open_sessions = max(self.max_open_sessions, self.open_sessions)

    def release_session(self) -> None:
        with self.lock:
            self.open_sessions -= 1

    def index_of(self, op: str, arg: str) -> int:
        return self.call_log.index((op, arg))

    def commands(self) -> List[str]:
        return [arg for op, arg in self.call_log if op == "exec"]

    def opened_files(self) -> List[str]:
        return [arg for op, arg in self.call_log if op == "open"]

    # --- remote behaviour ---

    def handle_command(self, command: str) -> Tuple[bytes, bytes, int]:
        if command in self.responses:
            return self.responses[command]
        argv = shlex.split(command)
        if argv[:2] == ["mkdir", "-p"]:
            for path in argv[2:]:
                if path in self.failing_mkdirs:
                    return b"", f"mkdir: cannot create directory '{path}'".encode(), 1
                with self.lock:
                    current = path
                    while current not in ("", "/"):
                        self.dirs.add(current)
                        current = posixpath.dirname(current)
            return b"", b"", 0
        if command == 'printf %s "$HOME"':
            return self.home.encode(), b"", 0
        return b"", f"sh: {argv[0]}: not found".encode(), 127

    # --- SessionProvider ---

    def new_session(self) -> FakeChannel:
        if self.closed:
            raise TransportError("connection closed")
        self._acquire_session()
        return FakeChannel(self)

    @contextmanager
    def open_file_for_write(self, remote_path: str) -> Iterator[FakeRemoteFile]:
        if self.closed:
            raise TransportError("connection closed")
        self.record("open", remote_path)
        if self.on_open is not None:
            self.on_open(remote_path)
        if posixpath.dirname(remote_path) not in self.dirs:
            raise RemoteIOError(f"Cannot create remote file {remote_path}: No such file")
        self._acquire_session()
        try:
            remote_file = FakeRemoteFile(self, remote_path)
            try:
                yield remote_file
            finally:
                remote_file.close()
        finally:
            self.release_session()

    def close(self) -> None:
        self.closed = True


class FakeConnectionFactory:
    """ConnectionFactory double handing out one FakeRemote."""

    def __init__(self, remote: FakeRemote, error: Optional[BaseException] = None) -> None:
        self.remote = remote
        self.error = error
        self.calls: List[dict] = []

    def create(self, params: dict) -> FakeRemote:
        self.calls.append(dict(params))
        if self.error is not None and params.get("key"):
            raise self.error
        return self.remote


class FakePromptProvider:
    """Prompt provider returning canned answers by message prefix."""

    def __init__(self, answers: Dict[str, str]) -> None:
        self.answers = answers
        self.asked: List[str] = []

    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        self.asked.append(message)
        for prefix, answer in self.answers.items():
            if message.startswith(prefix):
                return answer
        return default or ""

    def confirm(self, message: str, default: bool = False) -> bool:
        return default


def make_tree(root: Path, layout: Dict[str, Optional[bytes]]) -> Path:
    """Create files (bytes) and empty directories (None) under root."""
    root.mkdir(parents=True, exist_ok=True)
    for relative, content in layout.items():
        path = root / relative
        if content is None:
            path.mkdir(parents=True, exist_ok=True)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
    return root


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def ssh_error() -> paramiko.SSHException:
    return paramiko.SSHException("Server connection dropped")
