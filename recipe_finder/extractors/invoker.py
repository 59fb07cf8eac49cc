"""Run the generated browser script as a subprocess and capture its JSON output."""

from __future__ import annotations

import asyncio
import contextlib
import json
import os
import sys
import tempfile
from pathlib import Path

from loguru import logger

from recipe_finder.config.schema import ExtractorConfig
from recipe_finder.extractors.script import render_script
from recipe_finder.extractors.templates import TEMPLATES, ExtractorTemplate
from recipe_finder.search.errors import InvokeError

INSTALL_HINT = "python -m playwright install chromium"


def is_missing_browser_error(text: str) -> bool:
    """Detect Playwright launch failures caused by missing browser binaries."""
    lowered = text.lower()
    patterns = (
        "executable doesn't exist",
        "please run the following command",
        "browser has not been found",
    )
    return any(p in lowered for p in patterns)


class ExtractorInvoker:
    """(template id, query) -> JSON array text, or InvokeError."""

    def __init__(
        self,
        config: ExtractorConfig | None = None,
        templates: dict[str, ExtractorTemplate] | None = None,
    ):
        self.config = config or ExtractorConfig()
        self.templates = templates if templates is not None else TEMPLATES

    @property
    def python_executable(self) -> str:
        return self.config.python_executable.strip() or sys.executable

    async def invoke(self, template_id: str, query: str) -> str:
        template = self.templates.get(template_id)
        if template is None:
            raise InvokeError(f"no extractor template named {template_id!r}")

        script = render_script(
            template,
            headless=self.config.headless,
            navigation_timeout_ms=self.config.navigation_timeout_ms,
        )
        path = self._write_script(template_id, script)
        try:
            return await self._run(template_id, path, query)
        finally:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Failed to remove extractor script {}: {}", path, e)

    def _write_script(self, template_id: str, script: str) -> Path:
        try:
            fd, name = tempfile.mkstemp(prefix=f"recipe_{template_id}_", suffix=".py")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(script)
        except OSError as e:
            raise InvokeError(f"could not write extractor script: {e}") from e
        return Path(name)

    async def _run(self, template_id: str, path: Path, query: str) -> str:
        timeout = self.config.timeout_s
        logger.debug("Running extractor {} ({})", template_id, path.name)
        try:
            process = await asyncio.create_subprocess_exec(
                self.python_executable,
                str(path),
                query,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise InvokeError(f"failed to start extractor {template_id}: {e}") from e

        try:
            stdout_raw, stderr_raw = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError as e:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            raise InvokeError(f"extractor {template_id} timed out after {timeout}s") from e

        stdout = stdout_raw.decode("utf-8", errors="replace").strip()
        stderr = stderr_raw.decode("utf-8", errors="replace").strip()

        if process.returncode != 0:
            if is_missing_browser_error(stderr):
                raise InvokeError(
                    f"extractor {template_id} could not launch a browser; run `{INSTALL_HINT}`"
                )
            detail = stderr.splitlines()[-1] if stderr else f"exit code {process.returncode}"
            raise InvokeError(f"extractor {template_id} failed: {detail}")

        if not stdout:
            raise InvokeError(f"extractor {template_id} produced no output")

        # The payload is the last stdout line.
        payload = stdout.splitlines()[-1]
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise InvokeError(f"extractor {template_id} returned invalid JSON: {e}") from e
        if not isinstance(data, list):
            raise InvokeError(f"extractor {template_id} did not return a JSON array")

        logger.debug("Extractor {} returned {} items", template_id, len(data))
        return payload
