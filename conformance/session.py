"""Drive the page-hosted demuxer for one sample.

A session owns one page. ``open`` navigates to the harness page, waits for the
demuxer binding and binds the sample to the file input; exactly one read
(``get_media_info`` or ``seek_media_packet``) may follow. ``load`` and the read
run inside a single in-page async task, so the binding's ``Loaded`` state is
only ever observed from inside the page.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Dict, List, Optional

from playwright.async_api import Page as AsyncPage
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page

from .corpus import SampleFile
from .errors import DriverError
from .settings import HarnessConfig

logger = logging.getLogger(__name__)

PACKET_KINDS = ("video", "audio")

# Fixed seek parameters: a mid-stream packet rather than the first one.
SEEK_STREAM_INDEX = 1
SEEK_TARGET = 4

BINDING_READY_JS = """
(name) => {
  const demuxer = window[name];
  return !!demuxer && ['load', 'getMediaInfo', 'seekMediaPacket']
    .every((fn) => typeof demuxer[fn] === 'function');
}
"""

# Typed arrays are copied into plain arrays and undefined properties are
# dropped so the result survives serialization as plain data.
LOAD_AND_READ_JS = """
async ({ selector, binding, operation, args, timeoutMs }) => {
  const input = document.querySelector(selector);
  const file = input && input.files && input.files[0];
  if (!file) {
    throw new Error(`No file bound to ${selector}`);
  }
  const demuxer = window[binding];
  const run = async () => {
    await demuxer.load(file);
    return await demuxer[operation](...args);
  };
  let result;
  if (timeoutMs > 0) {
    let timer;
    const expire = new Promise((_, reject) => {
      timer = setTimeout(
        () => reject(new Error(`load() and ${operation}() did not settle within ${timeoutMs}ms`)),
        timeoutMs);
    });
    try {
      result = await Promise.race([run(), expire]);
    } finally {
      clearTimeout(timer);
    }
  } else {
    result = await run();
  }

  const plain = (value) => {
    if (value === undefined || value === null) return value;
    if (value instanceof ArrayBuffer) return Array.from(new Uint8Array(value));
    if (ArrayBuffer.isView(value)) {
      return Array.from(new Uint8Array(value.buffer, value.byteOffset, value.byteLength));
    }
    if (Array.isArray(value)) return value.map(plain);
    if (typeof value === 'object') {
      const out = {};
      for (const [key, item] of Object.entries(value)) {
        if (item !== undefined) out[key] = plain(item);
      }
      return out;
    }
    return value;
  };

  const out = plain(result);
  if (out && typeof out === 'object' && result.data && result.data.buffer) {
    out.bufferByteLength = result.data.buffer.byteLength;
  }
  return out;
}
"""


class SessionState(enum.Enum):
    IDLE = "idle"
    PAGE_LOADED = "page-loaded"
    FILE_BOUND = "file-bound"
    RESULT_OBTAINED = "result-obtained"
    FAILED = "failed"


def _check_kind(kind: str) -> None:
    if kind not in PACKET_KINDS:
        raise ValueError(f"Packet kind must be one of {PACKET_KINDS}, got {kind!r}")


def _as_media_info(raw: Any) -> Dict[str, Any]:
    # field-level problems are left to the comparison, which dumps both sides
    if not isinstance(raw, dict):
        raise DriverError(f"getMediaInfo() returned {type(raw).__name__}, expected an object")
    return raw


class _SessionBase:
    def __init__(self, page: Any, config: Optional[HarnessConfig] = None) -> None:
        self.page = page
        self.config = config or HarnessConfig()
        self.state = SessionState.IDLE
        self.sample: Optional[SampleFile] = None
        self.console: List[str] = []
        page.on("console", self._on_console)
        page.on("pageerror", self._on_page_error)

    def _on_console(self, message: Any) -> None:
        text = f"[{message.type}] {message.text}"
        self.console.append(text)
        logger.debug("console %s", text)

    def _on_page_error(self, error: Any) -> None:
        logger.warning("Uncaught page error while testing %s: %s", self.sample and self.sample.name, error)

    def _start_open(self, sample: SampleFile) -> None:
        if self.state is not SessionState.IDLE:
            raise DriverError(f"Session already opened ({self.state.value})")
        self.sample = sample
        logger.debug("Opening %s for %s", self.config.page_url, sample.name)

    def _start_read(self, operation: str, args: List[Any]) -> Dict[str, Any]:
        if self.state is not SessionState.FILE_BOUND:
            raise DriverError(f"Cannot call {operation}() in state {self.state.value}")
        # one read per session, even if this one fails
        self.state = SessionState.FAILED
        logger.debug("%s: load() then %s(%s)", self.sample.name, operation, ", ".join(map(repr, args)))
        return {
            "selector": self.config.input_selector,
            "binding": self.config.demuxer_global,
            "operation": operation,
            "args": args,
            "timeoutMs": self.config.case_timeout_ms,
        }

    def _fail(self, what: str, exc: Exception) -> DriverError:
        self.state = SessionState.FAILED
        return DriverError(f"{what}: {exc}")


class DemuxerSession(_SessionBase):
    page: Page

    def open(self, sample: SampleFile) -> None:
        self._start_open(sample)
        config = self.config
        try:
            self.page.goto(config.page_url)
        except PlaywrightError as exc:
            raise self._fail(f"Could not open {config.page_url}", exc) from exc
        self.state = SessionState.PAGE_LOADED
        try:
            self.page.wait_for_function(
                BINDING_READY_JS, arg=config.demuxer_global, timeout=config.binding_timeout_ms
            )
        except PlaywrightError as exc:
            raise self._fail(f"Demuxer binding window.{config.demuxer_global} unavailable", exc) from exc
        try:
            self.page.set_input_files(config.input_selector, str(sample.path))
        except PlaywrightError as exc:
            raise self._fail(f"Could not bind {sample.name} to {config.input_selector}", exc) from exc
        self.state = SessionState.FILE_BOUND

    def _read(self, operation: str, args: List[Any]) -> Any:
        payload = self._start_read(operation, args)
        try:
            result = self.page.evaluate(LOAD_AND_READ_JS, payload)
        except PlaywrightError as exc:
            raise self._fail(f"{operation}() failed for {self.sample.name}", exc) from exc
        self.state = SessionState.RESULT_OBTAINED
        return result

    def get_media_info(self) -> Dict[str, Any]:
        return _as_media_info(self._read("getMediaInfo", []))

    def seek_media_packet(
        self, kind: str, stream_index: int = SEEK_STREAM_INDEX, target: float = SEEK_TARGET
    ) -> Optional[Dict[str, Any]]:
        _check_kind(kind)
        return self._read("seekMediaPacket", [kind, stream_index, target])


class AsyncDemuxerSession(_SessionBase):
    page: AsyncPage

    async def open(self, sample: SampleFile) -> None:
        self._start_open(sample)
        config = self.config
        try:
            await self.page.goto(config.page_url)
        except PlaywrightError as exc:
            raise self._fail(f"Could not open {config.page_url}", exc) from exc
        self.state = SessionState.PAGE_LOADED
        try:
            await self.page.wait_for_function(
                BINDING_READY_JS, arg=config.demuxer_global, timeout=config.binding_timeout_ms
            )
        except PlaywrightError as exc:
            raise self._fail(f"Demuxer binding window.{config.demuxer_global} unavailable", exc) from exc
        try:
            await self.page.set_input_files(config.input_selector, str(sample.path))
        except PlaywrightError as exc:
            raise self._fail(f"Could not bind {sample.name} to {config.input_selector}", exc) from exc
        self.state = SessionState.FILE_BOUND

    async def _read(self, operation: str, args: List[Any]) -> Any:
        payload = self._start_read(operation, args)
        try:
            result = await self.page.evaluate(LOAD_AND_READ_JS, payload)
        except PlaywrightError as exc:
            raise self._fail(f"{operation}() failed for {self.sample.name}", exc) from exc
        self.state = SessionState.RESULT_OBTAINED
        return result

    async def get_media_info(self) -> Dict[str, Any]:
        return _as_media_info(await self._read("getMediaInfo", []))

    async def seek_media_packet(
        self, kind: str, stream_index: int = SEEK_STREAM_INDEX, target: float = SEEK_TARGET
    ) -> Optional[Dict[str, Any]]:
        _check_kind(kind)
        return await self._read("seekMediaPacket", [kind, stream_index, target])
