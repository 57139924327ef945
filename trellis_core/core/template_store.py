from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import logging
from pathlib import Path
import threading
from typing import Callable, NamedTuple

from trellis_ui.errors import CompileError
from trellis_ui.template.compiler import compile_markup
from trellis_ui.template.nodes import CompiledTemplate


LOGGER = logging.getLogger(__name__)

MarkupProvider = Callable[[], str]


class TemplateSnapshot(NamedTuple):
    revision: int
    template: CompiledTemplate | None


@dataclass(frozen=True)
class PublishResult:
    ok: bool
    revision: int
    error: CompileError | None = None


class TemplateStore:
    """Single-writer holder of the active compiled template.

    Readers take `snapshot()` once per frame and keep that reference for the
    whole frame; `publish` swaps in a fully compiled template or nothing.
    """

    def __init__(
        self,
        markup: str | None = None,
        *,
        compiler: Callable[[str], CompiledTemplate] = compile_markup,
    ) -> None:
        self._compiler = compiler
        self._write_lock = threading.Lock()
        self._snapshot = TemplateSnapshot(revision=0, template=None)
        self._last_error: CompileError | None = None
        if markup is not None:
            self.publish(markup)

    @property
    def revision(self) -> int:
        return self._snapshot.revision

    @property
    def template(self) -> CompiledTemplate | None:
        return self._snapshot.template

    @property
    def last_error(self) -> CompileError | None:
        return self._last_error

    def snapshot(self) -> TemplateSnapshot:
        return self._snapshot

    def publish(self, markup: str) -> PublishResult:
        with self._write_lock:
            current = self._snapshot
            try:
                template = self._compiler(markup)
            except CompileError as exc:
                self._last_error = exc
                LOGGER.warning("template compile failed; keeping revision %d: %s", current.revision, exc)
                return PublishResult(ok=False, revision=current.revision, error=exc)
            published = TemplateSnapshot(revision=current.revision + 1, template=template)
            self._snapshot = published
            self._last_error = None
        LOGGER.info(
            "published template revision %d (%d page(s))", published.revision, len(template.pages)
        )
        return PublishResult(ok=True, revision=published.revision)

    def publish_file(self, path: str | Path) -> PublishResult:
        return self.publish(Path(path).read_text(encoding="utf-8"))


class HotReloader:
    """Background recompiler fed by external "source changed" notifications.

    Pending notifications coalesce: only the most recent provider is compiled.
    """

    def __init__(
        self,
        store: TemplateStore,
        *,
        poll_interval_s: float = 0.05,
        on_result: Callable[[PublishResult], None] | None = None,
    ) -> None:
        if poll_interval_s <= 0:
            raise ValueError("poll_interval_s must be > 0")
        self._store = store
        self._poll_interval_s = poll_interval_s
        self._on_result = on_result
        self._pending: deque[MarkupProvider] = deque(maxlen=1)
        self._lock = threading.Lock()
        self._wake = threading.Event()
        self._running = threading.Event()
        self._thread: threading.Thread | None = None
        self._last_error: Exception | None = None
        self._last_result: PublishResult | None = None

    @property
    def last_error(self) -> Exception | None:
        return self._last_error

    @property
    def last_result(self) -> PublishResult | None:
        return self._last_result

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._running.set()
        self._thread = threading.Thread(target=self._run, name="trellis-hot-reload", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._running.clear()
        self._wake.set()
        if self._thread:
            self._thread.join(timeout=1.0)
            self._thread = None

    def notify_changed(self, markup_provider: MarkupProvider | str | Path) -> None:
        with self._lock:
            self._pending.append(_as_provider(markup_provider))
        self._wake.set()

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def drain(self) -> PublishResult | None:
        """Compile the latest pending source on the calling thread."""

        with self._lock:
            if not self._pending:
                return None
            provider = self._pending.popleft()
        try:
            markup = provider()
        except OSError as exc:
            self._last_error = exc
            LOGGER.warning("hot reload could not read markup: %s", exc)
            return None
        result = self._store.publish(markup)
        self._last_result = result
        if self._on_result is not None:
            self._on_result(result)
        return result

    def _run(self) -> None:
        while self._running.is_set():
            self._wake.wait(timeout=self._poll_interval_s)
            self._wake.clear()
            try:
                self.drain()
            except Exception as exc:  # noqa: BLE001
                LOGGER.exception("hot reload thread stopped")
                self._last_error = exc
                self._running.clear()
                break


def _as_provider(source: MarkupProvider | str | Path) -> MarkupProvider:
    if isinstance(source, Path):
        return lambda: source.read_text(encoding="utf-8")
    if isinstance(source, str):
        return lambda: source
    return source
