"""Momentum scoring and scan orchestration"""

from .momentum_composer import MomentumComposer, MomentumSignal, SignalType

__all__ = ["MomentumComposer", "MomentumSignal", "SignalType"]
