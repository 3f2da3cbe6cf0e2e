# ruff: noqa: TC003  # Path needed at runtime for method signatures
"""Data source reading template files from a directory tree."""

from __future__ import annotations

import errno
from collections.abc import Hashable
from pathlib import Path

from stache.exceptions import BackendError

# Path errors that mean "no such template file"
_MISSING_ERRNOS = frozenset({errno.ENOENT, errno.ENOTDIR, errno.ENAMETOOLONG})


def template_filename(name: str, extension: str) -> str:
    """Return the file name for a template name and extension.

    Args:
        name: Template name, possibly containing ``/`` separators.
        extension: Extension without the leading dot. Empty for none.

    Returns:
        The name with the extension appended.
    """
    return f"{name}.{extension}" if extension else name


class DirectoryDataSource:
    """Loads templates from files below a root directory.

    Template IDs are absolute, normalized ``Path`` objects. Names resolve
    relative to the directory of the enclosing template, or to the root
    directory for top-level lookups and template strings. A name starting
    with ``/`` always resolves from the root directory.

    Example:
        >>> source = DirectoryDataSource("/srv/templates", extension="txt")
        >>> # "profile" -> /srv/templates/profile.txt
        >>> # "partials/item" from /srv/templates/profile.txt
        >>> #   -> /srv/templates/partials/item.txt
    """

    def __init__(
        self,
        directory: Path | str,
        *,
        extension: str = "mustache",
        encoding: str = "utf-8",
    ) -> None:
        """Initialize the data source.

        Args:
            directory: Root directory of the templates.
            extension: Extension of template files, without the dot.
            encoding: Text encoding of template files.
        """
        self.directory: Path = Path(directory).resolve()
        self.extension: str = extension.removeprefix(".")
        self.encoding: str = encoding

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({str(self.directory)!r}, "
            f"extension={self.extension!r}, encoding={self.encoding!r})"
        )

    def template_id_for(self, name: str, base_id: Hashable | None) -> Path | None:
        """Return the path of the template file a name refers to.

        Args:
            name: Template name, e.g. ``profile`` or ``../partials/item``.
            base_id: Path of the enclosing template, or None.

        Returns:
            The resolved file path, or None if no such file exists or the
            name is too long to be a file name.

        Raises:
            BackendError: If the filesystem fails while checking the path.
        """
        if not name:
            return None

        if name.startswith("/"):
            base_dir = self.directory
            name = name.lstrip("/")
        elif isinstance(base_id, Path):
            base_dir = base_id.parent
        else:
            base_dir = self.directory

        try:
            path = (base_dir / template_filename(name, self.extension)).resolve()
            exists = path.is_file()
        except OSError as e:
            if e.errno in _MISSING_ERRNOS:
                return None
            msg = f"Failed to look up template {name!r} in {self.directory}: {e}"
            raise BackendError(msg, name=name, cause=e) from e
        if not exists:
            return None
        return path

    def template_string_for(self, template_id: Hashable) -> str | None:
        """Read a template file.

        Args:
            template_id: Path returned by ``template_id_for``.

        Returns:
            The decoded file content, or None if the file has disappeared.

        Raises:
            BackendError: If the file cannot be read or decoded.
        """
        path = Path(str(template_id))
        try:
            return path.read_bytes().decode(self.encoding)
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError, LookupError) as e:
            msg = f"Failed to read template file {path}: {e}"
            raise BackendError(msg, template_id=template_id, cause=e) from e
