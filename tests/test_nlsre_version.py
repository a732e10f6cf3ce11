from __future__ import annotations

import importlib.metadata
import importlib.util
import sys
import types
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
MODULE_PATH = ROOT / "src" / "nlsre" / "__init__.py"


def test_nlsre_version_falls_back_when_metadata_is_absent(monkeypatch) -> None:
    spec = importlib.util.spec_from_file_location("nlsre_init_under_test", MODULE_PATH)
    assert spec and spec.loader

    module = importlib.util.module_from_spec(spec)
    core = types.ModuleType("semantic_disambiguation")
    core.__all__ = ["marker"]  # type: ignore[attr-defined]
    core.marker = object()  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "semantic_disambiguation", core)

    def _raise_not_found(_: str) -> str:
        raise importlib.metadata.PackageNotFoundError

    monkeypatch.setattr(importlib.metadata, "version", _raise_not_found)

    spec.loader.exec_module(module)

    assert module.__version__ == "0+unknown"
    assert module.__all__ == ["marker", "__version__"]
    assert module.marker is core.marker  # type: ignore[attr-defined]


def test_nlsre_reexports_the_engine() -> None:
    import nlsre
    from semantic_disambiguation import SemanticDisambiguator

    assert nlsre.SemanticDisambiguator is SemanticDisambiguator
    assert "SemanticDisambiguator" in nlsre.__all__
    assert "__version__" in nlsre.__all__
