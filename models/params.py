from __future__ import annotations

import math
from dataclasses import dataclass, asdict

from config.constants import TAU, SIGMA, LAMBDA, P0, M0
from models.exceptions import InvalidParameter


def check_rate(name: str, value) -> float:
    """
    Return `value` as a float, raising InvalidParameter unless it is finite and > 0.
    """
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(value) or value <= 0:
        raise InvalidParameter(f"{name} must be a finite rate > 0, got {value}")
    return value


def check_amount(name: str, value) -> float:
    """
    Return `value` as a float, raising InvalidParameter unless it is finite and >= 0.
    """
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(value) or value < 0:
        raise InvalidParameter(f"{name} must be a finite amount >= 0, got {value}")
    return value


@dataclass(frozen=True)
class RateParameters:
    """
    Rate constants of the transcription -> splicing -> decay model.

    Attributes:
        tau (float): transcription rate (pre-mRNA produced per unit time).
        sigma (float): splicing rate (pre-mRNA -> mRNA).
        lam (float): decay rate of mRNA.
    """
    tau: float = TAU
    sigma: float = SIGMA
    lam: float = LAMBDA

    def __post_init__(self) -> None:
        object.__setattr__(self, "tau", check_rate("tau", self.tau))
        object.__setattr__(self, "sigma", check_rate("sigma", self.sigma))
        object.__setattr__(self, "lam", check_rate("lam", self.lam))

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class InitialState:
    """Pre-mRNA (P0) and mRNA (M0) amounts at t = 0."""
    P0: float = P0
    M0: float = M0

    def __post_init__(self) -> None:
        object.__setattr__(self, "P0", check_amount("P0", self.P0))
        object.__setattr__(self, "M0", check_amount("M0", self.M0))

    def as_dict(self) -> dict:
        return asdict(self)
