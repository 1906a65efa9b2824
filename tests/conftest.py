# Ensure the project src/ directory is on sys.path for imports during tests
import logging
import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Optionally, reduce Rich tracebacks noise in tests
os.environ.setdefault("PYTHONWARNINGS", "ignore")

from lmms_pkg.core.config import reset_settings  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep user/local settings files and LMMS_PKG_* variables out of tests."""
    for key in list(os.environ):
        if key.startswith("LMMS_PKG_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("LMMS_PKG_IGNORE_LOCAL_SETTINGS", "1")
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def restore_root_logging():
    # CLI runs reconfigure the root logger onto a stream that is closed afterwards
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def make_project(path: Path, body: str = "", **attrs: str) -> Path:
    """Write a minimal LMMS song project whose <song> holds ``body``."""
    root_attrs = {"type": "song", "version": "1.0", "creatorversion": "1.2.2", **attrs}
    rendered = " ".join(f'{k}="{v}"' for k, v in root_attrs.items() if v is not None)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        '<?xml version="1.0"?>\n<!DOCTYPE lmms-project>\n'
        f"<lmms-project {rendered}>"
        '<head bpm="128" timesig_numerator="3" timesig_denominator="4" mastervol="100"/>'
        f"<song><trackcontainer type=\"song\">{body}</trackcontainer></song>"
        "</lmms-project>\n",
        encoding="utf-8",
    )
    return path


def make_sample(path: Path, content: bytes | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content if content is not None else b"RIFF" + path.name.encode() + b"WAVEfmt ")
    return path


def instrument(src: str) -> str:
    return (
        '<track type="0" name="Sampler"><instrumenttrack>'
        f'<instrument name="audiofileprocessor"><audiofileprocessor src="{src}" reversed="0"/></instrument>'
        "</instrumenttrack></track>"
    )


def soundfont(src: str) -> str:
    return (
        '<track type="0" name="Piano"><instrumenttrack>'
        f'<instrument name="sf2player"><sf2player src="{src}" bank="0" patch="0"/></instrument>'
        "</instrumenttrack></track>"
    )


def sample_clip(src: str) -> str:
    return f'<track type="2" name="Audio"><sampletco src="{src}" pos="0" len="192"/></track>'
