"""
Adaptive invocation: try an SDK callable under several argument shapes.

A plan is an ordered list of InvocationAttempt. Attempts run in order and stop
at the first one that does not raise. Units of work (e.g. one order id each)
are processed one after another so logs and reports keep a stable order.
"""
import inspect
import logging
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from .errors import InvocationFailed
from .models import AttemptReport, HelperResult, InvocationAttempt, InvocationOutcome

logger = logging.getLogger("DeepBook.Invocation")


def error_message(err: BaseException) -> str:
    msg = str(err)
    return msg if msg else type(err).__name__


async def maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def try_call(fn: Callable, attempt: InvocationAttempt) -> InvocationOutcome:
    try:
        await maybe_await(fn(*attempt.args))
        return InvocationOutcome(label=attempt.label, ok=True)
    except Exception as e:
        return InvocationOutcome(label=attempt.label, ok=False, error=error_message(e))


async def run_plan(fn: Callable, plan: Sequence[InvocationAttempt], unit: Optional[str] = None) -> AttemptReport:
    report = AttemptReport(unit=unit)
    for attempt in plan:
        outcome = await try_call(fn, attempt)
        report.outcomes.append(outcome)
        if outcome.ok:
            logger.debug(f"[{unit or '-'}] built with signature {attempt.label}")
            break
    return report


async def invoke_plan(fn: Callable, plan: Sequence[InvocationAttempt], unit: Optional[str] = None) -> AttemptReport:
    """Single-unit plan. Raises InvocationFailed if every attempt failed."""
    report = await run_plan(fn, plan, unit=unit)
    if not report.succeeded:
        raise InvocationFailed(f"All {len(plan)} signatures failed for {unit or 'call'}", [report])
    return report


async def run_units(
    fn: Callable,
    units: Iterable[Tuple[str, Sequence[InvocationAttempt]]],
) -> List[AttemptReport]:
    """
    Run one plan per unit, sequentially and independently.

    Returns every report when at least one unit succeeded; failed units are
    logged as warnings. Raises InvocationFailed carrying all reports otherwise.
    """
    reports: List[AttemptReport] = []
    for unit, plan in units:
        report = await run_plan(fn, plan, unit=unit)
        reports.append(report)
        if not report.succeeded:
            logger.warning(f"Could not build call for {unit} (continuing): "
                           f"{[o.to_dict() for o in report.failures]}")

    if not any(r.succeeded for r in reports):
        raise InvocationFailed(f"All signatures failed for {len(reports)} unit(s)", reports)
    return reports


def positional_capacity(fn: Callable) -> Optional[int]:
    """Positional arguments fn accepts; None when unbounded or not introspectable."""
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return None
    count = 0
    for p in sig.parameters.values():
        if p.kind == p.VAR_POSITIONAL:
            return None
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


def _accepts_positional(fn: Callable) -> bool:
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return True
    for p in sig.parameters.values():
        if p.kind == p.VAR_POSITIONAL:
            return True
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD) and p.default is p.empty:
            return True
    return False


async def call_sdk_helper(helper: Callable, txb: Any, *args: Any) -> HelperResult:
    """
    Call an SDK helper whose shape may be any of:
      helper(txb, *args)            adds commands to txb
      helper(*args) -> builder(txb) configure then build
      helper(*args)                 executes internally
    """
    if not callable(helper):
        raise TypeError("helper is not callable")

    if _accepts_positional(helper):
        try:
            r = await maybe_await(helper(txb, *args))
            return HelperResult(built=True, exec_result=r)
        except Exception as e:
            logger.debug(f"helper(txb, ...) failed, trying builder shape: {error_message(e)}")

    # errors from here on are not retried: the helper is called at most once more
    r = await maybe_await(helper(*args))
    if callable(r):
        await maybe_await(r(txb))
        return HelperResult(built=True)
    return HelperResult(built=False, exec_result=r)
