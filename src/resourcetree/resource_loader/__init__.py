"""
Loading of resource bundles from explicit files and directory trees.

Usage::

    from resourcetree.resource_loader import ResourceLoader, LoaderConfig

    loader = ResourceLoader(LoaderConfig(exclude=["drafts/"]))
    bundles = loader.load(files=["gateway.yaml"], dirs=["config/"])
"""

from resourcetree.resource_loader.loader import ResourceLoader, load_from_files_and_dirs
from resourcetree.resource_loader.traversal import is_hidden, iter_resource_files
from resourcetree.resource_loader.types import ErrorPolicy, LoaderConfig

__all__ = [
    "ErrorPolicy",
    "LoaderConfig",
    "ResourceLoader",
    "is_hidden",
    "iter_resource_files",
    "load_from_files_and_dirs",
]
