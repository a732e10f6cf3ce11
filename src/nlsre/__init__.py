# src/nlsre/__init__.py
"""
nl-sre-semantico distribution import namespace.

Re-exports the core `semantic_disambiguation` package so callers can write
`from nlsre import SemanticDisambiguator`.
"""

from importlib.metadata import PackageNotFoundError, version

import semantic_disambiguation
from semantic_disambiguation import *  # noqa: F401,F403

try:
    __version__ = version("nl-sre-semantico")
except PackageNotFoundError:  # pragma: no cover - running from a source checkout without metadata
    __version__ = "0+unknown"

__all__ = [*semantic_disambiguation.__all__, "__version__"]
