import asyncio
import inspect
import os
from pathlib import Path
import sys
from collections.abc import Iterator

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from moodcal.config import override_runtime_env  # noqa: E402


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    marker = pyfuncitem.get_closest_marker("asyncio")
    if marker is None:
        return None
    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None
    fixtureinfo = getattr(pyfuncitem, "_fixtureinfo", None)
    if fixtureinfo is None:
        return None
    kwargs = {name: pyfuncitem.funcargs[name] for name in fixtureinfo.argnames}
    asyncio.run(test_func(**kwargs))
    return True


@pytest.fixture(autouse=True)
def _test_environment(tmp_path: Path) -> Iterator[None]:
    token_file = tmp_path / "state" / "token.json"
    previous = os.environ.get("MOODCAL_TOKEN_FILE")
    os.environ["MOODCAL_TOKEN_FILE"] = str(token_file)
    override_runtime_env(None)
    try:
        yield
    finally:
        override_runtime_env(None)
        if previous is None:
            os.environ.pop("MOODCAL_TOKEN_FILE", None)
        else:
            os.environ["MOODCAL_TOKEN_FILE"] = previous
