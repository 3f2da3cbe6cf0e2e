"""Data source adapters for template repositories.

Each adapter implements the ``DataSource`` protocol from
``stache.repository``:

- ``DirectoryDataSource``: template files in a directory tree
- ``PackageDataSource``: template resources inside an importable package
- ``UrlDataSource``: template documents served over HTTP
- ``DictionaryDataSource``: template strings in a mapping
"""

from ._dictionary import DictionaryDataSource
from ._directory import DirectoryDataSource, template_filename
from ._package import PackageDataSource, ResourceID
from ._url import UrlDataSource

__all__ = [
    "DictionaryDataSource",
    "DirectoryDataSource",
    "PackageDataSource",
    "ResourceID",
    "UrlDataSource",
    "template_filename",
]
