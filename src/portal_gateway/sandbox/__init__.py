"""
portal_gateway.sandbox

Filesystem confinement for untrusted, client-supplied paths.
"""

from portal_gateway.sandbox.confiner import PathConfiner, PathEscapeError, ResolvedPath

__all__ = ["PathConfiner", "PathEscapeError", "ResolvedPath"]
