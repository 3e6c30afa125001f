"""
File system plugin for termshell.

The executor uses it for ``>>`` redirects; commands may use it through the
``file-system`` service.
"""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from ..constants import WORKSPACE_DIR
from ..utils import expand_path


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class FileSystem(ABC):
    """File system collaborator."""

    @abstractmethod
    def resolve_path(self, path: str) -> Path:
        """Resolve a user-supplied path to an absolute path."""

    @abstractmethod
    def exists(self, path: PathLike) -> bool:
        pass

    @abstractmethod
    def is_directory(self, path: PathLike) -> bool:
        pass

    @abstractmethod
    def read_file(self, path: PathLike) -> str:
        pass

    @abstractmethod
    def write_file(self, path: PathLike, content: str, append: bool = False) -> None:
        pass

    @abstractmethod
    def create_file(self, path: PathLike, content: str = "") -> None:
        pass

    async def persist(self) -> None:
        """Flush pending changes. Local files are written immediately."""


class LocalFileSystem(FileSystem):
    """
    File system rooted at a workspace directory.

    Relative paths resolve against the workspace; ``~`` expands to the
    user's home directory.
    """

    def __init__(self, root: Optional[PathLike] = None) -> None:
        self._root = Path(root) if root else WORKSPACE_DIR
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def resolve_path(self, path: str) -> Path:
        return expand_path(path.strip(), self._root)

    def exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def is_directory(self, path: PathLike) -> bool:
        return Path(path).is_dir()

    def read_file(self, path: PathLike) -> str:
        """
        Read a text file.

        Raises:
            FileNotFoundError: If the path does not exist
            IsADirectoryError: If the path is a directory
        """
        target = Path(path)
        if target.is_dir():
            raise IsADirectoryError(f"{target} is a directory")
        return target.read_text(encoding='utf-8')

    def write_file(self, path: PathLike, content: str, append: bool = False) -> None:
        target = Path(path)
        if target.is_dir():
            raise IsADirectoryError(f"{target} is a directory")
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, 'a' if append else 'w', encoding='utf-8') as f:
            f.write(content)
        logger.debug(f"{'Appended to' if append else 'Wrote'} file: {target}")

    def create_file(self, path: PathLike, content: str = "") -> None:
        """
        Create a new file.

        Raises:
            FileExistsError: If the path already exists
        """
        target = Path(path)
        if target.exists():
            raise FileExistsError(f"{target} already exists")
        self.write_file(target, content)
