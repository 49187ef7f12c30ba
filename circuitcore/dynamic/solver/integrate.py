from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar
import logging
from ...errors import CircuitValidationError
from .results import ResultSet, SubStep

S = TypeVar("S")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntegratorConfig:
    """
    Tolerances of the error-controlled step-halving integrator.

    Attributes:
        min_dt: Smallest sub-step in seconds (default: 1e-5). A step at or
            below it is accepted without an error check, which bounds the
            recursion depth. The accepted step is always a full min_dt, even
            when less time than that remains: a remainder below min_dt (or a
            whole interval shorter than min_dt) advances the state by min_dt,
            so the state can run ahead of the requested time by up to min_dt
            per interval.
        error_threshold: Largest tolerated distance between one step of dt
            and two steps of dt/2 (default: 1e-5).
    """
    min_dt: float = 1e-5
    error_threshold: float = 1e-5

    def __post_init__(self) -> None:
        if self.min_dt <= 0:
            raise ValueError("min_dt must be positive.")
        if self.error_threshold <= 0:
            raise ValueError("error_threshold must be positive.")


def integrate(
    initial_state: S,
    update: Callable[[S, float], S],
    distance: Callable[[S, S], float],
    total_time: float,
    config: IntegratorConfig | None = None,
    floor_update: Optional[Callable[[S, float], S]] = None,
) -> ResultSet[S]:
    """
    Advance a state over `total_time` with adaptive sub-steps.

    Each candidate sub-step dt is checked by comparing one update of dt with
    two updates of dt/2; the two-half-step result is kept when they agree
    within `config.error_threshold`, otherwise dt is halved. After an accepted
    sub-step the next attempt doubles dt (clamped to the remaining time) so
    larger steps come back once the dynamics smooth out.

    Args:
        initial_state: State at the start of the interval.
        update: Pure function (state, dt) -> new state.
        distance: Disagreement between two candidate states.
        total_time: Interval length in seconds (non-negative).
        config: Integrator tolerances (optional). If None, uses IntegratorConfig().
        floor_update: Update used for the unchecked min_dt steps (optional).
            If None, uses `update`.

    Returns:
        ResultSet with the accepted (dt, state) sub-steps in order. A zero
        interval gives an empty set.
    """
    if config is None:
        config = IntegratorConfig()
    if floor_update is None:
        floor_update = update
    if total_time < 0:
        raise CircuitValidationError("total_time must not be negative.")

    state = initial_state
    elapsed = 0.0
    steps: list[SubStep[S]] = []
    attempted_dt = total_time
    while elapsed < total_time:
        step = _search(state, update, floor_update, distance, attempted_dt, config)
        state = step.state
        steps.append(step)
        elapsed += step.dt

        attempted_dt = min(step.dt * 2, total_time - elapsed)

    logger.debug("Integrated %.3g s in %d sub-steps.", total_time, len(steps))
    return ResultSet(steps)


def _search(
    state: S,
    update: Callable[[S, float], S],
    floor_update: Callable[[S, float], S],
    distance: Callable[[S, S], float],
    dt: float,
    config: IntegratorConfig,
) -> SubStep[S]:
    """
    Find the largest dt (halving from the proposed one) with acceptable error.

    When dt is halved, the half step just computed becomes the coarse
    estimate of the next level, so each level after the first costs two
    updates instead of three.
    """
    coarse: Optional[S] = None
    while dt > config.min_dt:
        if coarse is None:
            coarse = update(state, dt)
        half = update(state, dt / 2)
        fine = update(half, dt / 2)
        if distance(coarse, fine) < config.error_threshold:
            return SubStep(dt, fine)
        dt = dt / 2
        coarse = half
    return SubStep(config.min_dt, floor_update(state, config.min_dt))
