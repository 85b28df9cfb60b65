"""Run Context Management.

Context-local run state using contextvars for binding run IDs,
job names and the stock currently being processed to log entries.
"""

import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


# Context variables for run-scoped data
_run_id_var: ContextVar[str] = ContextVar("run_id", default="")
_job_var: ContextVar[str] = ContextVar("job", default="")
_symbol_var: ContextVar[str] = ContextVar("symbol", default="")
_extra_context_var: ContextVar[dict] = ContextVar("extra_context", default={})


def generate_run_id() -> str:
    """Generate a unique run ID using UUID4."""
    return str(uuid.uuid4())


def get_run_id() -> str:
    """Get the current run ID from context."""
    return _run_id_var.get()


def get_job() -> str:
    """Get the current job name from context."""
    return _job_var.get()


def get_symbol() -> str:
    """Get the symbol currently being processed."""
    return _symbol_var.get()


def get_context_dict() -> dict[str, Any]:
    """Get all context variables as a dictionary for log binding."""
    ctx = {}
    run_id = _run_id_var.get()
    if run_id:
        ctx["run_id"] = run_id
    job = _job_var.get()
    if job:
        ctx["job"] = job
    symbol = _symbol_var.get()
    if symbol:
        ctx["symbol"] = symbol
    extra = _extra_context_var.get()
    if extra:
        ctx.update(extra)
    return ctx


@dataclass
class RunContext:
    """Context manager for run-scoped logging context.

    Binds run_id and job to all log entries emitted while a sweep or
    a simulation request is being processed. Restores the previous
    values on exit, so contexts nest.

    Example:
        with RunContext(job="anomaly_sweep") as ctx:
            for symbol in symbols:
                with ctx.for_symbol(symbol):
                    logger.info("checking")  # includes run_id, job, symbol
    """

    run_id: str = ""
    job: str = ""
    extra: dict[str, Any] = field(default_factory=dict)
    started_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    _tokens: list = field(default_factory=list, repr=False)

    def __post_init__(self):
        if not self.run_id:
            self.run_id = generate_run_id()

    def __enter__(self) -> "RunContext":
        self._tokens = [
            (_run_id_var, _run_id_var.set(self.run_id)),
            (_job_var, _job_var.set(self.job)),
            (_extra_context_var, _extra_context_var.set(self.extra.copy())),
        ]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()

    @property
    def elapsed_ms(self) -> float:
        """Milliseconds since context was created."""
        delta = datetime.now(timezone.utc) - self.started_at
        return delta.total_seconds() * 1000

    def bind(self, **kwargs: Any) -> None:
        """Add extra key-value pairs to the context."""
        current = _extra_context_var.get()
        updated = {**current, **kwargs}
        _extra_context_var.set(updated)
        self.extra.update(kwargs)

    def for_symbol(self, symbol: str) -> "_SymbolScope":
        """Bind a symbol for the duration of a with-block."""
        return _SymbolScope(symbol)


class _SymbolScope:
    def __init__(self, symbol: str):
        self.symbol = symbol
        self._token = None

    def __enter__(self) -> "_SymbolScope":
        self._token = _symbol_var.set(self.symbol)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        _symbol_var.reset(self._token)
