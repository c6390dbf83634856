"""
Live sharing state verification for Sharewatch.
"""

from sharewatch.verification.resolver import (
    FOLDER_MIME_TYPE,
    DriveItemResolver,
    ItemResolver,
    classify_permissions,
)
from sharewatch.verification.verifier import LiveStateVerifier

__all__ = [
    "FOLDER_MIME_TYPE",
    "DriveItemResolver",
    "ItemResolver",
    "LiveStateVerifier",
    "classify_permissions",
]
