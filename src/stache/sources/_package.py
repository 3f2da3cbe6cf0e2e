"""Data source reading templates shipped as package resources."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from importlib import resources
from typing import TYPE_CHECKING

from stache.exceptions import BackendError

from ._directory import template_filename

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable
    from types import ModuleType


@dataclass(frozen=True, slots=True)
class ResourceID:
    """Identifies a template resource inside a package.

    Attributes:
        package: Dotted name of the package.
        resource: ``/``-separated resource path inside the package.
    """

    package: str
    resource: str

    def __str__(self) -> str:
        return f"{self.package}:{self.resource}"


class PackageDataSource:
    """Loads templates from the resources of an importable package.

    Resources form a flat namespace rooted at the package: the enclosing
    template is ignored, so ``{{>header}}`` always loads
    ``header.<extension>`` from the package root. Names may contain ``/`` to
    reach resources in sub-directories.
    """

    def __init__(
        self,
        package: str | ModuleType,
        *,
        extension: str = "mustache",
        encoding: str = "utf-8",
    ) -> None:
        """Initialize the data source.

        Args:
            package: Package, or its dotted name, holding the templates.
            extension: Extension of template resources, without the dot.
            encoding: Text encoding of template resources.
        """
        self.package: str = package if isinstance(package, str) else package.__name__
        self.extension: str = extension.removeprefix(".")
        self.encoding: str = encoding

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.package!r}, "
            f"extension={self.extension!r}, encoding={self.encoding!r})"
        )

    def _traversable(self, resource: str) -> Traversable:
        node = resources.files(self.package)
        for part in resource.split("/"):
            node = node.joinpath(part)
        return node

    def template_id_for(
        self, name: str, base_id: Hashable | None
    ) -> ResourceID | None:
        """Return the resource ID a template name refers to.

        Args:
            name: Template name.
            base_id: Ignored; package resources have no hierarchy.

        Returns:
            The resource ID, or None if the resource does not exist.

        Raises:
            BackendError: If the package cannot be imported, or is a plain
                module.
        """
        parts = [part for part in name.split("/") if part]
        if not parts or ".." in parts:
            return None

        resource = template_filename("/".join(parts), self.extension)
        try:
            exists = self._traversable(resource).is_file()
        except (ModuleNotFoundError, TypeError) as e:
            msg = f"Template package {self.package!r} cannot be imported as a package"
            raise BackendError(msg, name=name, cause=e) from e
        if not exists:
            return None
        return ResourceID(self.package, resource)

    def template_string_for(self, template_id: Hashable) -> str | None:
        """Read a template resource.

        Args:
            template_id: ResourceID returned by ``template_id_for``.

        Returns:
            The decoded resource content, or None if it does not exist.

        Raises:
            BackendError: If the resource cannot be read or decoded.
        """
        if not isinstance(template_id, ResourceID):
            return None
        try:
            data = self._traversable(template_id.resource).read_bytes()
            return data.decode(self.encoding)
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError, LookupError) as e:
            msg = f"Failed to read template resource {template_id}: {e}"
            raise BackendError(msg, template_id=template_id, cause=e) from e
