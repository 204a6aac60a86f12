"""Scenario configuration and presets."""

from buffett_valuation.scenarios.config import get_preset
from buffett_valuation.scenarios.config import PRESETS
from buffett_valuation.scenarios.config import ScenarioConfig

__all__ = [
  'ScenarioConfig',
  'PRESETS',
  'get_preset',
]
