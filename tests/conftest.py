from __future__ import annotations

import sys
import zipfile
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
PYTHON_SRC = ROOT / "python"

if str(PYTHON_SRC) not in sys.path:
    sys.path.insert(0, str(PYTHON_SRC))
else:
    sys.path.remove(str(PYTHON_SRC))
    sys.path.insert(0, str(PYTHON_SRC))


WEBJARS = "META-INF/resources/webjars"


@pytest.fixture
def make_webjar_dir(tmp_path):
    """Create ``<tmp>/<name>/META-INF/resources/webjars/<rel>`` files; return ``<tmp>/<name>``."""

    def _make(paths, name="classes"):
        root = tmp_path / name
        (root / WEBJARS).mkdir(parents=True, exist_ok=True)
        for rel in paths:
            target = root / WEBJARS / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(f"/* {rel} */\n", encoding="utf-8")
        return root

    return _make


@pytest.fixture
def make_webjar_jar(tmp_path):
    """Write a jar holding ``paths`` below the WebJars prefix plus ``extra`` raw entries."""

    def _make(name, paths, extra=()):
        jar = tmp_path / name
        with zipfile.ZipFile(jar, "w") as zf:
            zf.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\n")
            for rel in paths:
                zf.writestr(f"{WEBJARS}/{rel}", f"/* {rel} */\n")
            for entry in extra:
                zf.writestr(entry, "")
        return jar

    return _make
