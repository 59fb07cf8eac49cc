from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import pytest

import recipe_finder.extractors.invoker as invoker_module
from recipe_finder.config.schema import ExtractorConfig
from recipe_finder.extractors.invoker import ExtractorInvoker
from recipe_finder.search.errors import InvokeError

pytestmark = pytest.mark.asyncio


class FakeProcess:
    def __init__(
        self,
        *,
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
        delay_sec: float = 0.0,
    ):
        self._stdout = stdout.encode("utf-8")
        self._stderr = stderr.encode("utf-8")
        self.returncode = returncode
        self.delay_sec = delay_sec
        self.killed = False

    async def communicate(self) -> tuple[bytes, bytes]:
        if self.delay_sec:
            await asyncio.sleep(self.delay_sec)
        return self._stdout, self._stderr

    def kill(self) -> None:
        self.killed = True

    async def wait(self) -> int:
        return self.returncode


def _install_subprocess_spy(monkeypatch: pytest.MonkeyPatch, process: FakeProcess) -> dict[str, object]:
    captured: dict[str, object] = {}

    async def fake_create_subprocess_exec(*args, **kwargs):
        captured["args"] = list(args)
        script = Path(args[1])
        captured["script_path"] = script
        captured["script"] = script.read_text(encoding="utf-8")
        return process

    monkeypatch.setattr(invoker_module.asyncio, "create_subprocess_exec", fake_create_subprocess_exec)
    return captured


def _items(*pairs: tuple[str, str]) -> str:
    return json.dumps([{"title": t, "url": u} for t, u in pairs])


async def test_invoke_runs_script_with_query_argument(monkeypatch: pytest.MonkeyPatch) -> None:
    payload = _items(("White Chili", "https://www.allrecipes.com/recipe/1/white-chili/"))
    captured = _install_subprocess_spy(monkeypatch, FakeProcess(stdout=payload + "\n"))

    result = await ExtractorInvoker().invoke("allrecipes", '"white chili"')

    args = captured["args"]
    assert result == payload
    assert args[0] == sys.executable
    assert args[2] == '"white chili"'
    assert len(args) == 3
    assert "sync_playwright" in captured["script"]
    assert "https://www.allrecipes.com/search?q={query}" in captured["script"]
    assert not captured["script_path"].exists()


async def test_invoke_uses_configured_interpreter(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _install_subprocess_spy(monkeypatch, FakeProcess(stdout="[]"))
    invoker = ExtractorInvoker(ExtractorConfig(python_executable="/opt/py/bin/python"))

    assert await invoker.invoke("delish", "chili") == "[]"
    assert captured["args"][0] == "/opt/py/bin/python"


async def test_invoke_takes_last_stdout_line(monkeypatch: pytest.MonkeyPatch) -> None:
    payload = _items(("Chili", "https://example.com/chili"))
    _install_subprocess_spy(monkeypatch, FakeProcess(stdout=f"warming up\n{payload}\n"))

    assert await ExtractorInvoker().invoke("delish", "chili") == payload


async def test_nonzero_exit_is_invoke_error(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _install_subprocess_spy(
        monkeypatch,
        FakeProcess(stderr="Traceback\nRuntimeError: page crashed", returncode=1),
    )

    with pytest.raises(InvokeError, match="page crashed"):
        await ExtractorInvoker().invoke("allrecipes", "chili")
    assert not captured["script_path"].exists()


async def test_missing_browser_error_carries_install_hint(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_subprocess_spy(
        monkeypatch,
        FakeProcess(
            stderr="Executable doesn't exist at /root/.cache/ms-playwright/chromium/chrome",
            returncode=1,
        ),
    )

    with pytest.raises(InvokeError, match="playwright install chromium"):
        await ExtractorInvoker().invoke("allrecipes", "chili")


@pytest.mark.parametrize("stdout", ["", "   \n", "not json", '{"title": "x"}'])
async def test_unusable_output_is_invoke_error(monkeypatch: pytest.MonkeyPatch, stdout: str) -> None:
    captured = _install_subprocess_spy(monkeypatch, FakeProcess(stdout=stdout))

    with pytest.raises(InvokeError):
        await ExtractorInvoker().invoke("allrecipes", "chili")
    assert not captured["script_path"].exists()


async def test_timeout_kills_process_and_removes_script(monkeypatch: pytest.MonkeyPatch) -> None:
    process = FakeProcess(stdout="[]", delay_sec=2.0)
    captured = _install_subprocess_spy(monkeypatch, process)
    invoker = ExtractorInvoker(ExtractorConfig(timeout_s=1))

    with pytest.raises(InvokeError, match="timed out"):
        await invoker.invoke("allrecipes", "chili")

    assert process.killed is True
    assert not captured["script_path"].exists()


async def test_spawn_failure_is_invoke_error(monkeypatch: pytest.MonkeyPatch) -> None:
    paths: list[Path] = []

    async def failing_exec(*args, **kwargs):
        paths.append(Path(args[1]))
        raise FileNotFoundError("no such interpreter")

    monkeypatch.setattr(invoker_module.asyncio, "create_subprocess_exec", failing_exec)

    with pytest.raises(InvokeError, match="failed to start"):
        await ExtractorInvoker().invoke("allrecipes", "chili")
    assert paths and not paths[0].exists()


async def test_unknown_template_is_invoke_error() -> None:
    with pytest.raises(InvokeError, match="no extractor template"):
        await ExtractorInvoker().invoke("chowhound", "chili")



async def test_timeout_tolerates_process_already_gone(monkeypatch: pytest.MonkeyPatch) -> None:
    class ExitedProcess(FakeProcess):
        def kill(self) -> None:
            raise ProcessLookupError()

    captured = _install_subprocess_spy(monkeypatch, ExitedProcess(delay_sec=2.0))
    invoker = ExtractorInvoker(ExtractorConfig(timeout_s=1))

    with pytest.raises(InvokeError, match="timed out"):
        await invoker.invoke("allrecipes", "chili")

    assert not captured["script_path"].exists()
