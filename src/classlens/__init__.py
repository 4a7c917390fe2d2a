"""classlens: classpath resolution, navigation and workspace sessions for a class-file viewer."""

from .browser import APPLICATION_TITLE, BrowserSession
from .classpath.entries import ArchiveEntry, ClassLocation, DirectoryEntry, ModuleEntry
from .classpath.resolver import ClasspathConfig
from .errors import MalformedSessionError, StorageFailureError

__all__ = [
    "APPLICATION_TITLE",
    "BrowserSession",
    "ArchiveEntry",
    "ClassLocation",
    "DirectoryEntry",
    "ModuleEntry",
    "ClasspathConfig",
    "MalformedSessionError",
    "StorageFailureError",
]

__version__ = "0.1.0"
