"""
Version Reporter

Reports the backend tag and the library version. Needs neither a context
nor the trust anchor.
"""

from typing import NamedTuple

from .constants import TrustAnchorType

__version__ = '1.2.0'


class VersionDescriptor(NamedTuple):
    """Backend tag and semantic version of the library"""
    uta_type: TrustAnchorType
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.uta_type.name} {self.major}.{self.minor}.{self.patch}"


def get_version(uta_type: TrustAnchorType) -> VersionDescriptor:
    """Build the version descriptor for the given backend tag."""
    major, minor, patch = (int(part) for part in __version__.split('.'))
    return VersionDescriptor(TrustAnchorType(uta_type), major, minor, patch)
