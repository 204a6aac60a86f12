import pytest

from buffett_valuation.domain.types import CompanyFundamentals
from buffett_valuation.scenarios.config import ScenarioConfig


@pytest.fixture
def sample_fundamentals() -> CompanyFundamentals:
  """Healthy company with round numbers.

  Owner earnings: 1000 + 200 - 150 - 50 = 1000
  ROE: 1000 / 4000 = 25%
  RONTA: 1000 / (8000 - 1000 - 3000) = 25%
  Debt/Equity: 1000 / 4000 = 0.25
  EPS: 1000 / 100 = 10
  """
  return CompanyFundamentals(
      ticker='TEST',
      net_income=1000.0,
      depreciation_amortization=200.0,
      capital_expenditures=150.0,
      working_capital_change=50.0,
      shareholders_equity=4000.0,
      total_debt=1000.0,
      total_assets=8000.0,
      intangible_assets=1000.0,
      total_liabilities=3000.0,
      shares_outstanding=100.0,
      eps_history=(6.0, 7.0, 8.0, 10.0),
      market_price=80.0,
  )


@pytest.fixture
def distressed_fundamentals() -> CompanyFundamentals:
  """Company with zero equity, losses turning to profit and no shares."""
  return CompanyFundamentals(
      ticker='DISTRESS',
      net_income=-50.0,
      depreciation_amortization=10.0,
      capital_expenditures=5.0,
      shareholders_equity=0.0,
      total_debt=500.0,
      total_assets=500.0,
      intangible_assets=0.0,
      total_liabilities=500.0,
      shares_outstanding=0.0,
      eps_history=(-1.0, 0.5),
  )


@pytest.fixture
def ten_year_config() -> ScenarioConfig:
  """5% growth for 10 years discounted at 10%, 3% terminal growth."""
  return ScenarioConfig(
      name='ten_year',
      discount_rate=0.10,
      terminal_growth_rate=0.03,
      growth_rate=0.05,
      n_years=10,
  )
