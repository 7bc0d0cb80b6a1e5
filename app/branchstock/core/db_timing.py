from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass


@dataclass
class _DbTimer:
    elapsed_ms: float = 0.0


# Sync endpoints run in a copied context, so the timer is mutated in place
# rather than re-set.
_request_timer: ContextVar[_DbTimer | None] = ContextVar("request_db_timer", default=None)


def begin_request_timing() -> object:
    return _request_timer.set(_DbTimer())


def end_request_timing(token: object) -> float | None:
    timer = _request_timer.get()
    _request_timer.reset(token)
    return timer.elapsed_ms if timer is not None else None


def is_timing() -> bool:
    return _request_timer.get() is not None


def add_query_time(delta_ms: float) -> None:
    timer = _request_timer.get()
    if timer is None:
        return
    timer.elapsed_ms += delta_ms
