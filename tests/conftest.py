import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def _is_e2e_test(request: pytest.FixtureRequest) -> bool:
    return "tests/e2e/" in str(request.node.fspath).replace("\\", "/")


@pytest.fixture(autouse=True)
def isolated_herobook_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("HEROBOOK_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def reset_http_circuits():
    from herobook.infrastructure.resilient_http import reset_circuit_breakers

    reset_circuit_breakers()
    yield
    reset_circuit_breakers()


@pytest.fixture(autouse=True)
def e2e_data_dir(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    if not _is_e2e_test(request):
        return

    monkeypatch.setenv("HEROBOOK_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("HEROBOOK_NARRATION_ENABLED", "0")
    monkeypatch.setenv("HEROBOOK_LOG_LEVEL", "WARNING")
