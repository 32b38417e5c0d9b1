"""Run the matrix concurrently, one browser context per case."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass
from typing import AsyncContextManager, AsyncIterator, Callable, List, Optional, Sequence, TextIO

from playwright.async_api import Browser, async_playwright

from .matrix import Case, arun_case
from .session import AsyncDemuxerSession
from .settings import HarnessConfig

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AsyncContextManager[AsyncDemuxerSession]]


@dataclass
class CaseResult:
    case: Case
    passed: bool
    error: Optional[str] = None
    elapsed_s: float = 0.0


def _context_sessions(browser: Browser, config: HarnessConfig) -> SessionFactory:
    @contextlib.asynccontextmanager
    async def open_session() -> AsyncIterator[AsyncDemuxerSession]:
        context = await browser.new_context()
        context.set_default_timeout(config.case_timeout_ms)
        try:
            page = await context.new_page()
            yield AsyncDemuxerSession(page, config)
        finally:
            await context.close()

    return open_session


@contextlib.asynccontextmanager
async def chromium_sessions(config: HarnessConfig) -> AsyncIterator[SessionFactory]:
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=config.headless)
        try:
            yield _context_sessions(browser, config)
        finally:
            await browser.close()


async def _run_one(
    case: Case,
    open_session: SessionFactory,
    semaphore: asyncio.Semaphore,
    timeout: Optional[float],
    out: Optional[TextIO],
) -> CaseResult:
    async with semaphore:
        started = time.monotonic()
        error: Optional[str] = None
        try:
            # on timeout the case is cancelled first, then its context is closed
            async with open_session() as session:
                await asyncio.wait_for(arun_case(session, case, out), timeout)
        except asyncio.TimeoutError:
            error = f"TimeoutError: case did not finish within {timeout}s"
        except Exception as exc:  # noqa: BLE001 - reported as this case's failure
            error = f"{type(exc).__name__}: {exc}"
        elapsed = time.monotonic() - started
    if error:
        logger.warning("FAIL %s (%.2fs): %s", case.case_id, elapsed, error)
    else:
        logger.info("PASS %s (%.2fs)", case.case_id, elapsed)
    return CaseResult(case=case, passed=error is None, error=error, elapsed_s=elapsed)


async def run_matrix(
    cases: Sequence[Case],
    config: Optional[HarnessConfig] = None,
    *,
    concurrency: int = 4,
    timeout: Optional[float] = None,
    out: Optional[TextIO] = None,
    session_factory: Optional[SessionFactory] = None,
) -> List[CaseResult]:
    """Execute every case independently; results keep the order of ``cases``."""
    config = config or HarnessConfig()
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _gather(open_session: SessionFactory) -> List[CaseResult]:
        return list(
            await asyncio.gather(*(_run_one(c, open_session, semaphore, timeout, out) for c in cases))
        )

    if session_factory is not None:
        return await _gather(session_factory)
    async with chromium_sessions(config) as open_session:
        return await _gather(open_session)
