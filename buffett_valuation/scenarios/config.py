"""
Scenario configuration for valuation runs.

ScenarioConfig is a serializable (JSON-friendly) configuration class holding
the rates a caller has already decided on. Nothing here estimates rates from
data: presets are fixed numbers chosen by the analyst.
"""

from collections.abc import Callable
from dataclasses import asdict
from dataclasses import dataclass
from dataclasses import fields
from dataclasses import replace
import json
from typing import Any


@dataclass(frozen=True)
class ScenarioConfig:
  """
  Configuration for a valuation scenario.

  Attributes:
    name: Human-readable scenario name
    discount_rate: Required return used to discount cash flows (r)
    terminal_growth_rate: Perpetual growth after the explicit period (g)
    growth_rate: Owner's earnings growth during the explicit period
    n_years: Number of explicit forecast years
  """
  name: str = 'default'
  discount_rate: float = 0.10
  terminal_growth_rate: float = 0.03
  growth_rate: float = 0.05
  n_years: int = 10

  @classmethod
  def default(cls) -> 'ScenarioConfig':
    """
    Create default scenario configuration.

    Uses:
      - 10% discount rate
      - 3% terminal growth
      - 5% explicit-period growth
      - 10-year forecast
    """
    return cls()

  @classmethod
  def conservative(cls) -> 'ScenarioConfig':
    """Higher hurdle rate, slower growth."""
    return cls(
        name='conservative',
        discount_rate=0.12,
        terminal_growth_rate=0.02,
        growth_rate=0.03,
        n_years=10,
    )

  @classmethod
  def optimistic(cls) -> 'ScenarioConfig':
    """Lower hurdle rate, faster growth."""
    return cls(
        name='optimistic',
        discount_rate=0.09,
        terminal_growth_rate=0.03,
        growth_rate=0.08,
        n_years=10,
    )

  def with_overrides(self, **overrides: Any) -> 'ScenarioConfig':
    """Return a copy with every non-None override applied."""
    changes = {k: v for k, v in overrides.items() if v is not None}
    return replace(self, **changes)

  def to_dict(self) -> dict[str, Any]:
    """Convert to dictionary."""
    return asdict(self)

  def to_json(self) -> str:
    """Serialize to JSON string."""
    return json.dumps(self.to_dict(), indent=2)

  @classmethod
  def from_dict(cls, data: dict[str, Any]) -> 'ScenarioConfig':
    """
    Create from dictionary.

    Raises:
      ValueError: If data contains keys that are not config fields
    """
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
      raise ValueError(f'Unknown scenario fields: {", ".join(unknown)}')
    return cls(**data)

  @classmethod
  def from_json(cls, json_str: str) -> 'ScenarioConfig':
    """Create from JSON string."""
    return cls.from_dict(json.loads(json_str))


PRESETS: dict[str, Callable[[], ScenarioConfig]] = {
    'default': ScenarioConfig.default,
    'conservative': ScenarioConfig.conservative,
    'optimistic': ScenarioConfig.optimistic,
}


def get_preset(name: str) -> ScenarioConfig:
  """
  Create a preset scenario by name.

  Raises:
    ValueError: If name is not a known preset
  """
  if name not in PRESETS:
    raise ValueError(f'Unknown scenario: {name}. '
                     f'Available: {", ".join(sorted(PRESETS))}')
  return PRESETS[name]()
