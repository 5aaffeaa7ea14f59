"""
Local tree walk producing transfer tasks level by level
"""
import os
import stat
from pathlib import Path
from typing import FrozenSet, List, Tuple

from ...core.exceptions import LocalIOError
from ...core.logging import get_logger
from ...core.utils import join_remote
from .models import SymlinkPolicy, TaskKind, TransferTask

logger = get_logger(__name__)


class TreeWalker:
    """
    Breadth-first walk over a local directory.

    The walker never looks below a directory until the caller asks for its
    children, which lets the synchronizer create a whole level remotely before
    anything inside it is dispatched. Each directory task carries the
    (device, inode) identities of its own ancestors; a followed link whose
    target is one of them is a cycle and is skipped. Two links to the same
    directory, or a link that sorts before its real target, are both walked.
    """

    def __init__(
        self,
        local_root: Path,
        remote_root: str,
        symlink_policy: SymlinkPolicy = SymlinkPolicy.SKIP,
    ):
        self.local_root = Path(local_root)
        self.remote_root = remote_root
        self.symlink_policy = symlink_policy
        self.skipped: List[Path] = []

    def root_task(self) -> TransferTask:
        """Directory task for the local root itself"""
        try:
            st = os.stat(self.local_root)
        except OSError as e:
            raise LocalIOError(f"Cannot stat local root {self.local_root}: {e}") from e
        if not stat.S_ISDIR(st.st_mode):
            raise LocalIOError(f"Local root is not a directory: {self.local_root}")

        return TransferTask(
            kind=TaskKind.DIRECTORY,
            local_path=self.local_root,
            remote_path=join_remote(self.remote_root),
            relative_path="",
            ancestors=frozenset({(st.st_dev, st.st_ino)}),
        )

    def children(self, parent: TransferTask) -> List[TransferTask]:
        """
        List the entries of a directory task, sorted by name.

        Raises:
            LocalIOError: Directory cannot be listed or an entry cannot be stat'ed
        """
        try:
            with os.scandir(parent.local_path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise LocalIOError(f"Cannot list {parent.local_path}: {e}") from e

        tasks = []
        for entry in entries:
            local_path = Path(entry.path)
            relative = f"{parent.relative_path}/{entry.name}" if parent.relative_path else entry.name

            try:
                if entry.is_symlink():
                    if self.symlink_policy is SymlinkPolicy.SKIP:
                        self._skip(local_path, "symbolic link")
                        continue
                    try:
                        st = entry.stat(follow_symlinks=True)
                    except FileNotFoundError:
                        self._skip(local_path, "dangling symbolic link")
                        continue
                else:
                    st = entry.stat(follow_symlinks=False)
            except OSError as e:
                raise LocalIOError(f"Cannot stat {local_path}: {e}") from e

            ancestors: FrozenSet[Tuple[int, int]] = frozenset()
            if stat.S_ISDIR(st.st_mode):
                identity = (st.st_dev, st.st_ino)
                if identity in parent.ancestors:
                    self._skip(local_path, "symbolic link cycle")
                    continue
                kind = TaskKind.DIRECTORY
                ancestors = parent.ancestors | {identity}
            elif stat.S_ISREG(st.st_mode):
                kind = TaskKind.FILE
            else:
                self._skip(local_path, "not a regular file")
                continue

            tasks.append(
                TransferTask(
                    kind=kind,
                    local_path=local_path,
                    remote_path=join_remote(self.remote_root, relative),
                    relative_path=relative,
                    ancestors=ancestors,
                )
            )
        return tasks

    def _skip(self, path: Path, reason: str) -> None:
        logger.warning(f"Skipping {path}: {reason}")
        self.skipped.append(path)
