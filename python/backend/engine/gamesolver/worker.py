"""Background solver worker - message passing around a ``Solver``.

Requests go into an inbox queue; a daemon thread turns each one into
exactly one ``{"type": "done", ...}`` response, delivered to the optional
``on_response`` callback and to the ``responses`` queue.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable

from backend.engine.gamesolver.presets import EngineConfig
from backend.engine.gamesolver.solver import Solver
from backend.models.messages import INVALID_INPUT, SolveRequest, SolveResponse

logger = logging.getLogger(__name__)

Message = dict[str, Any]

_STOP = object()


class SolverWorker:
    """Runs solve requests on its own thread."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        on_response: Callable[[Message], None] | None = None,
    ) -> None:
        self.solver = Solver(config)
        self.on_response = on_response
        self.responses: queue.Queue[Message] = queue.Queue()
        self._inbox: queue.Queue[Any] = queue.Queue()
        self._cancel = threading.Event()
        self._thread: threading.Thread | None = None

    # -- lifecycle ------------------------------------------------------------

    def start(self) -> SolverWorker:
        if self._thread is not None and self._thread.is_alive():
            return self
        self._cancel.clear()
        self._thread = threading.Thread(
            target=self._loop, name="puzzle-solver", daemon=True
        )
        self._thread.start()
        logger.debug("Solver worker started")
        return self

    def stop(self, timeout: float | None = 5.0) -> None:
        """Cancel the running search and let the thread exit."""
        if self._thread is None:
            return
        self._cancel.set()
        self._inbox.put(_STOP)
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("Solver worker did not stop in time")
        self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def __enter__(self) -> SolverWorker:
        return self.start()

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # -- messages -------------------------------------------------------------

    def post(self, message: Message) -> None:
        """Queue a ``{"type": "solve", "tiles", "size", "mode"}`` message."""
        if not self.running:
            raise RuntimeError("Solver worker is not running; call start() first.")
        self._inbox.put(message)

    def request(self, message: Message, timeout: float | None = None) -> Message:
        """Post *message* and block for its response."""
        self.post(message)
        return self.responses.get(timeout=timeout)

    # -- thread body ----------------------------------------------------------

    def _loop(self) -> None:
        while True:
            message = self._inbox.get()
            if message is _STOP:
                break
            self._deliver(self._process(message).to_dict())

    def _process(self, message: Any) -> SolveResponse:
        try:
            if not isinstance(message, dict) or message.get("type", "solve") != "solve":
                raise ValueError(f"Unsupported message: {message!r}")
            request = SolveRequest.from_dict(message)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(f"Malformed solve request: {exc}")
            return SolveResponse(None, INVALID_INPUT)

        logger.info(f"Solving {request.size}x{request.size} board ({request.mode})")
        response = self.solver.handle(request, self._cancel)
        logger.info(
            f"Done: method={response.method}, "
            f"moves={len(response.moves) if response.moves is not None else None}, "
            f"{response.elapsed:.2f}s"
        )
        return response

    def _deliver(self, response: Message) -> None:
        self.responses.put(response)
        if self.on_response is None:
            return
        try:
            self.on_response(response)
        except Exception:
            logger.exception("on_response callback failed")
