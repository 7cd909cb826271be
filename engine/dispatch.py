"""
Dispatch — hands run requests to the core and returns result/error messages.

One handler (handle_message), two execution strategies:
  "inline"   runs in the caller's thread; the returned Future is already done
  "process"  runs in a single worker process so the caller stays responsive

The core is never duplicated between the two; only where it executes changes.

Usage:
    with SimulationDispatcher("process") as dispatcher:
        future = dispatcher.submit({"periods": 12, "sims": 5000, ...})
        msg = future.result()      # {"type": "result", ...} or {"type": "error", ...}
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ProcessPoolExecutor
from typing import Any, Dict, Literal, Mapping, Optional

from inputs.validators import normalize_parameters

from .messages import ErrorMessage, ResultMessage, RunMessage, RunRequest
from .runner import run_simulation

logger = logging.getLogger(__name__)

Strategy = Literal["inline", "process"]
STRATEGIES = ("inline", "process")


def handle_message(payload: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Worker-side handler for one message.

    Messages other than "run" are ignored (returns None). A run answers with a
    result message, or with an error message describing any failure.
    """
    if not isinstance(payload, Mapping) or payload.get("type") != "run":
        return None

    try:
        msg = RunMessage.model_validate(dict(payload))
        params, _ = normalize_parameters(msg.params)
        result = run_simulation(params)
        return ResultMessage(sims=params.path_count, result=result.to_dict()).model_dump()
    except Exception as exc:
        logger.error("Run request failed: %s", exc)
        return ErrorMessage(error=str(exc)).model_dump()


def run_message(raw_params: Mapping[str, Any]) -> Dict[str, Any]:
    """Wrap raw form fields in a run message and handle it."""
    return handle_message({"type": "run", "params": dict(raw_params)})


class SimulationDispatcher:
    """Submits runs using the configured execution strategy."""

    def __init__(self, strategy: Strategy = "inline"):
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy {strategy!r}. Use one of {STRATEGIES}.")
        self.strategy = strategy
        self._pool: Optional[ProcessPoolExecutor] = None

    def submit(self, raw_params) -> "Future[Dict[str, Any]]":
        """Submit one run; raw_params is a mapping of form fields or a RunRequest."""
        if isinstance(raw_params, RunRequest):
            raw_params = raw_params.model_dump()

        if self.strategy == "process":
            if self._pool is None:
                self._pool = ProcessPoolExecutor(max_workers=1)
            return self._pool.submit(run_message, dict(raw_params))

        future: "Future[Dict[str, Any]]" = Future()
        future.set_result(run_message(raw_params))
        return future

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def __enter__(self) -> "SimulationDispatcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
