"""Data source fetching templates over HTTP."""

from __future__ import annotations

from collections.abc import Hashable

import httpx

from stache.exceptions import BackendError

from ._directory import template_filename

HTTP_NOT_FOUND = 404


class UrlDataSource:
    """Loads templates from URLs below a base URL.

    Template IDs are absolute URL strings. Names are joined against the URL
    of the enclosing template, so ``{{>partials/item}}`` inside
    ``https://example.com/t/profile.mustache`` loads
    ``https://example.com/t/partials/item.mustache``. Top-level names, names
    from template strings, and names starting with ``/`` are joined against
    the base URL.

    ``template_id_for`` does not touch the network; a missing document is
    detected when its content is fetched.
    """

    def __init__(
        self,
        base_url: str,
        *,
        extension: str = "mustache",
        encoding: str = "utf-8",
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the data source.

        Args:
            base_url: URL of the template root. A trailing ``/`` is added
                when missing.
            extension: Extension of template documents, without the dot.
            encoding: Text encoding of template documents.
            client: httpx client to issue requests with. A default client is
                created on first use when omitted.
        """
        self.base_url: httpx.URL = httpx.URL(
            base_url if base_url.endswith("/") else f"{base_url}/"
        )
        self.extension: str = extension.removeprefix(".")
        self.encoding: str = encoding
        self._client: httpx.Client | None = client

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({str(self.base_url)!r}, "
            f"extension={self.extension!r}, encoding={self.encoding!r})"
        )

    @property
    def client(self) -> httpx.Client:
        """The httpx client used for requests."""
        if self._client is None:
            self._client = httpx.Client(follow_redirects=True)
        return self._client

    def close(self) -> None:
        """Close the underlying client."""
        if self._client is not None:
            self._client.close()

    def template_id_for(self, name: str, base_id: Hashable | None) -> str | None:
        """Return the URL a template name refers to.

        Args:
            name: Template name.
            base_id: URL of the enclosing template, or None.

        Returns:
            The absolute URL as a string, or None for an empty name.

        Raises:
            BackendError: If the name cannot be joined into a valid URL.
        """
        if not name:
            return None

        try:
            if name.startswith("/"):
                base = self.base_url
                name = name.lstrip("/")
            elif isinstance(base_id, str):
                base = httpx.URL(base_id)
            else:
                base = self.base_url
            return str(base.join(template_filename(name, self.extension)))
        except httpx.InvalidURL as e:
            msg = f"Template name {name!r} does not form a valid URL: {e}"
            raise BackendError(msg, name=name, cause=e) from e

    def template_string_for(self, template_id: Hashable) -> str | None:
        """Fetch a template document.

        Args:
            template_id: URL returned by ``template_id_for``.

        Returns:
            The decoded document, or None when the server answers 404.

        Raises:
            BackendError: On transport errors, other HTTP error statuses, or
                undecodable content.
        """
        url = str(template_id)
        try:
            response = self.client.get(url)
            if response.status_code == HTTP_NOT_FOUND:
                return None
            _ = response.raise_for_status()
            return response.content.decode(self.encoding)
        except (
            httpx.HTTPError,
            httpx.InvalidURL,
            UnicodeDecodeError,
            LookupError,
        ) as e:
            msg = f"Failed to fetch template {url}: {e}"
            raise BackendError(msg, template_id=template_id, cause=e) from e
