"""
Adaptation rules: multi-condition deload detection, stimulus efficiency,
and recovery-time estimates.

Builds on the threshold check in fatigue.py with trend signals kept on the
fatigue state (soreness, stimulus history, RIR errors).
"""

import logging
import math
from typing import Sequence

from .config import DEFAULT_CONFIG, ModelConfig
from .fatigue import calculate_readiness, check_deload_needed
from .models import (
    DeloadRecommendation,
    FatigueState,
    LongTermTrend,
    RecoveryEstimate,
    StimulusEfficiency,
    StimulusHistoryEntry,
)

logger = logging.getLogger(__name__)


def _is_plateau(values: Sequence[float], band: float) -> bool:
    """All values within +/- band of their mean (a zero mean is no plateau)."""
    if not values:
        return False
    avg = sum(values) / len(values)
    if avg <= 0:
        return False
    return all(abs(v - avg) < avg * band for v in values)


def get_deload_recommendation(
    state: FatigueState,
    cfg: ModelConfig | None = None,
) -> DeloadRecommendation:
    """
    Combine the threshold check with four trend conditions.

    Conditions counted:
    1. Systemic readiness below DELOAD_THRESHOLD.
    2. Soreness above SORENESS_HIGH_LEVEL in more than SORENESS_MUSCLE_COUNT
       muscles.
    3. The last STIMULUS_PLATEAU_SESSIONS stimulus totals within
       +/- STIMULUS_PLATEAU_BAND of their mean while systemic readiness is
       above PLATEAU_MIN_READINESS.
    4. Each of the last PERFORMANCE_ERROR_SESSIONS error entries has an RIR
       error below PERFORMANCE_ERROR_THRESHOLD.

    A deload is needed when the threshold check fires or at least
    DELOAD_MIN_CONDITIONS conditions hold.

    Args:
        state: Current fatigue state (recovered to the day of interest)
        cfg: Model configuration

    Returns:
        DeloadRecommendation
    """
    cfg = cfg or DEFAULT_CONFIG
    readiness = calculate_readiness(state)
    systemic = readiness.systemic_readiness
    conditions: list[str] = []

    if systemic < cfg.deload_threshold:
        conditions.append("Low systemic readiness")

    sore = [m for m, s in state.muscle_soreness.items() if s > cfg.soreness_high_level]
    if len(sore) > cfg.soreness_muscle_count:
        conditions.append("Persistent muscle soreness")

    recent = [h.total for h in state.stimulus_history[-cfg.stimulus_plateau_sessions:]]
    if (
        len(recent) >= cfg.stimulus_plateau_sessions
        and _is_plateau(recent, cfg.stimulus_plateau_band)
        and systemic > cfg.plateau_min_readiness
    ):
        conditions.append("Stimulus plateau despite recovery")

    n_err = cfg.performance_error_sessions
    errors = state.performance_errors[-n_err:] if n_err > 0 else []
    if n_err > 0 and len(errors) >= n_err:
        if all(any(e < cfg.performance_error_threshold for e in entry.errors) for entry in errors):
            conditions.append("Consistent performance decline")

    basic = check_deload_needed(readiness.muscle_readiness, systemic, cfg)
    met = len(conditions)
    logger.debug("Deload conditions met: %d %s (basic=%s)", met, conditions, basic.needed)

    if basic.needed or met >= cfg.deload_min_conditions:
        message = basic.message if basic.needed else f"Deload recommended: {met} conditions met"
        return DeloadRecommendation(
            needed=True,
            conditions_met=met,
            conditions=conditions,
            message=message,
            basic=basic,
        )

    return DeloadRecommendation(
        needed=False,
        conditions_met=met,
        conditions=conditions,
        message=basic.message,
        basic=basic,
    )


def calculate_stimulus_efficiency(
    stimulus: dict[str, float],
    local_fatigue: dict[str, float],
    cfg: ModelConfig | None = None,
) -> dict[str, float]:
    """
    Stimulus per unit of fatigue: stimulus / max(fatigue, epsilon).

    Display only; no decision in the model reads it.

    Args:
        stimulus: Per-muscle stimulus (set counts)
        local_fatigue: Per-muscle fatigue
        cfg: Model configuration

    Returns:
        Per-muscle efficiency for every muscle with stimulus
    """
    cfg = cfg or DEFAULT_CONFIG
    eps = cfg.stimulus_efficiency_epsilon
    return {m: s / max(local_fatigue.get(m, 0.0), eps) for m, s in stimulus.items()}


def detect_stimulus_trend(history: Sequence[StimulusHistoryEntry], window: int = 4) -> LongTermTrend:
    """
    Direction of the last *window* stimulus totals.

    Non-decreasing -> increasing, non-increasing -> decreasing, otherwise
    stable.  Fewer than *window* entries is insufficient data.
    """
    recent = [h.total for h in history[-window:]]
    if len(recent) < window:
        return "insufficient_data"
    pairs = list(zip(recent, recent[1:]))
    if all(b >= a for a, b in pairs):
        return "increasing"
    if all(b <= a for a, b in pairs):
        return "decreasing"
    return "stable"


def get_stimulus_efficiency(
    state: FatigueState,
    cfg: ModelConfig | None = None,
) -> StimulusEfficiency:
    """Efficiency of the latest logged session plus the recent stimulus trend."""
    if not state.stimulus_history:
        return StimulusEfficiency(efficiency={}, trend="insufficient_data")
    latest = state.stimulus_history[-1]
    return StimulusEfficiency(
        efficiency=calculate_stimulus_efficiency(latest.stimulus, state.local_fatigue, cfg),
        trend=detect_stimulus_trend(state.stimulus_history),
        recent_totals=[h.total for h in state.stimulus_history[-4:]],
    )


def days_to_target(fatigue: float, rate: float, target_readiness: float) -> int:
    """
    Whole days until *fatigue* drops below the target fatigue floor.

    target = -ln(target_readiness); days = ceil(ln(fatigue / target) / rate)
    when fatigue exceeds target, else 0.  Domain errors and non-finite
    results map to 0.

    Args:
        fatigue: Current fatigue
        rate: Daily recovery rate
        target_readiness: Readiness to reach (e.g. 0.85)

    Returns:
        Days (>= 0)
    """
    if fatigue <= 0:
        return 0
    try:
        target = -math.log(target_readiness)
        if fatigue <= target:
            return 0
        days = math.log(fatigue / target) / rate
    except (ValueError, ZeroDivisionError, OverflowError):
        logger.debug("Recovery estimate undefined for fatigue=%r rate=%r", fatigue, rate)
        return 0
    if not math.isfinite(days):
        return 0
    return max(0, math.ceil(days))


def estimate_recovery_time(
    local_fatigue: dict[str, float],
    systemic_fatigue: float,
    cfg: ModelConfig | None = None,
) -> RecoveryEstimate:
    """
    Days until each muscle and the body reach RECOVERY_TARGET_READINESS.

    Args:
        local_fatigue: Per-muscle fatigue
        systemic_fatigue: Systemic fatigue
        cfg: Model configuration

    Returns:
        RecoveryEstimate
    """
    cfg = cfg or DEFAULT_CONFIG
    target = cfg.recovery_target_readiness
    muscle_days = {
        m: days_to_target(f, cfg.local_recovery_rate, target) for m, f in local_fatigue.items()
    }
    systemic_days = days_to_target(systemic_fatigue, cfg.systemic_recovery_rate, target)
    return RecoveryEstimate(muscle_days=muscle_days, systemic_days=systemic_days)
