"""Process-wide PDFium engine.

PDFium is not thread-safe, so every call into ``pypdfium2`` is executed on a
single dedicated worker thread owned by the engine. The engine is created
lazily on first use and shared by all conversions in the process.

Lifecycle::

    UNINITIALIZED --ensure_engine()--> INITIALIZING --ok--> READY
                                            |                  |
                                            +--error--> FAILED |
                                                           |   |
    ensure_engine() retries from FAILED <------------------+   |
    reset_engine() returns READY to UNINITIALIZED <------------+

Concurrent callers that arrive while the engine is INITIALIZING await the
same task, so initialization runs at most once per attempt.
"""

import asyncio
import atexit
import concurrent.futures
import enum
import functools
import importlib
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from pdf2img.errors import EngineInitializationError
from pdf2img.timeout_utils import with_timeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

BACKEND_MODULE = "pypdfium2"
WORKER_THREAD_NAME = "pdf2img-pdfium"


class EngineState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


@dataclass
class PdfiumEngine:
    """Handle to the loaded PDFium binding and its worker thread."""

    pdfium: Any
    executor: concurrent.futures.ThreadPoolExecutor
    version: Optional[str] = None

    async def run(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run ``func`` on the engine worker thread and await its result."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self.executor, functools.partial(func, *args, **kwargs)
        )

    async def run_with_deadline(
        self, timeout_seconds: float, func: Callable[..., T], *args: Any
    ) -> T:
        """Run ``func`` on the engine worker with a limit on its running time.

        The deadline starts when the worker begins the call, so time spent
        queued behind earlier calls does not count against it. On timeout the
        caller stops waiting, but the worker stays busy until ``func`` returns
        and later calls queue behind it.

        Raises:
            TimeoutError: If ``func`` runs longer than ``timeout_seconds``.
        """
        loop = asyncio.get_running_loop()
        started: "concurrent.futures.Future[None]" = concurrent.futures.Future()

        def call() -> T:
            started.set_result(None)
            return func(*args)

        future = loop.run_in_executor(self.executor, call)
        await asyncio.wait(
            {asyncio.wrap_future(started), future},
            return_when=asyncio.FIRST_COMPLETED,
        )
        return await with_timeout(future, timeout_seconds)

    def close(self) -> None:
        """Stop the worker thread once queued calls have finished."""
        logger.debug("Shutting down PDFium worker")
        self.executor.shutdown(wait=True)


@dataclass
class _EngineSlot:
    state: EngineState = EngineState.UNINITIALIZED
    task: Optional["asyncio.Task[PdfiumEngine]"] = None
    engine: Optional[PdfiumEngine] = None
    error: Optional[BaseException] = None
    attempts: int = 0


_slot = _EngineSlot()


def _load_backend() -> Any:
    """Import the PDFium binding. Runs on the worker thread."""
    return importlib.import_module(BACKEND_MODULE)


async def _initialize(slot: _EngineSlot) -> PdfiumEngine:
    executor = concurrent.futures.ThreadPoolExecutor(
        max_workers=1, thread_name_prefix=WORKER_THREAD_NAME
    )
    loop = asyncio.get_running_loop()
    try:
        pdfium = await loop.run_in_executor(executor, _load_backend)
    except BaseException as e:
        executor.shutdown(wait=False)
        slot.state = EngineState.FAILED
        slot.task = None
        slot.error = e
        logger.error(f"Failed to initialize PDFium engine: {e}")
        if isinstance(e, Exception):
            raise EngineInitializationError(
                f"Failed to initialize PDF engine: {e}"
            ) from e
        raise

    engine = PdfiumEngine(
        pdfium=pdfium,
        executor=executor,
        version=getattr(pdfium, "V_PYPDFIUM2", None)
        or getattr(pdfium, "__version__", None),
    )
    slot.state = EngineState.READY
    slot.engine = engine
    slot.task = None
    slot.error = None
    logger.debug(f"PDFium engine ready (pypdfium2 {engine.version})")
    return engine


def _consume_result(task: "asyncio.Task[PdfiumEngine]") -> None:
    # Every waiter may have been cancelled; the failure is already logged
    # and kept on the slot.
    if not task.cancelled():
        task.exception()


def _is_stale(task: "asyncio.Task[PdfiumEngine]") -> bool:
    # A task left behind by an event loop that has since been closed.
    return task.get_loop().is_closed()


async def ensure_engine() -> PdfiumEngine:
    """Return the process-wide engine, initializing it on first use.

    The first caller starts initialization; callers arriving while it is in
    flight share the same task and therefore the same outcome. Once the
    engine is ready this returns without suspending.

    Raises:
        EngineInitializationError: If loading the PDFium binding fails. The
            failure is delivered to every caller waiting on that attempt and
            the next call starts a fresh attempt.
    """
    if _slot.state is EngineState.READY and _slot.engine is not None:
        return _slot.engine

    slot = _slot
    if (
        slot.state is not EngineState.INITIALIZING
        or slot.task is None
        or _is_stale(slot.task)
    ):
        slot.state = EngineState.INITIALIZING
        slot.attempts += 1
        logger.debug(f"Initializing PDFium engine (attempt {slot.attempts})")
        slot.task = asyncio.ensure_future(_initialize(slot))
        slot.task.add_done_callback(_consume_result)

    # Shield so that a cancelled caller does not cancel the shared task.
    return await asyncio.shield(slot.task)


def get_engine() -> Optional[PdfiumEngine]:
    """Return the engine if it is ready, without initializing it."""
    if _slot.state is EngineState.READY:
        return _slot.engine
    return None


def engine_state() -> EngineState:
    """Return the current state of the process-wide engine slot."""
    return _slot.state


def reset_engine() -> None:
    """Tear down the engine and return the slot to its initial state.

    Registered with :mod:`atexit`; callers do not need to call it. An
    in-flight initialization is left to finish on its own loop.
    """
    global _slot
    engine = _slot.engine
    _slot = _EngineSlot()
    if engine is not None:
        engine.close()


atexit.register(reset_engine)
