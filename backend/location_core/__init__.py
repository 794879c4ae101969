# Location core: post resolution, edit overlay, saved view
from location_core.errors import ExternalServiceError, StorageError, UnrecognizedPlatformError
from location_core.overlay import latest_edit_per_location, merge_location
from location_core.platforms import PostPlatform, detect_platform
from location_core.resolver import PostResolver
from location_core.saved_view import build_saved_view

__all__ = [
    "ExternalServiceError",
    "PostPlatform",
    "PostResolver",
    "StorageError",
    "UnrecognizedPlatformError",
    "build_saved_view",
    "detect_platform",
    "latest_edit_per_location",
    "merge_location",
]
