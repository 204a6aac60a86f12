"""
Pure financial ratio functions.

Buffett-style fundamental metrics computed from already-parsed figures. No
pandas, no I/O, no logging: every function validates its inputs and returns
a MetricOutput carrying either the value or the ErrorKind that prevented it.

Key functions:
  owners_earnings: Net income adjusted for non-cash charges and reinvestment
  return_on_equity: Net income / shareholders' equity
  return_on_net_tangible_assets: Net income / net tangible assets
  debt_to_equity: Total debt / shareholders' equity
  earnings_per_share: Net income / shares outstanding
  eps_cagr: Compound annual growth rate between two EPS values
"""

from math import isfinite
from numbers import Real
from typing import Optional

from buffett_valuation.domain.types import ErrorKind, MetricOutput


def check_finite(**values: float) -> Optional[MetricOutput]:
  """Return an INVALID_INPUT failure for the first NaN or infinite value."""
  for name, value in values.items():
    if not isfinite(value):
      reason = f'{name} must be a finite number, got {value}'
      return MetricOutput.failure(ErrorKind.INVALID_INPUT,
                                  reason,
                                  argument=name)
  return None


def is_whole_number(value: Real) -> bool:
  """True for ints and integral floats; bools are rejected."""
  if isinstance(value, bool):
    return False
  if isinstance(value, int):
    return True
  return isinstance(value, float) and value.is_integer()


def _ratio(numerator: float, denominator: float,
           denominator_name: str) -> MetricOutput[float]:
  if denominator == 0:
    return MetricOutput.failure(ErrorKind.DIVISION_BY_ZERO,
                                f'{denominator_name} is zero',
                                argument=denominator_name)

  value = numerator / denominator
  if not isfinite(value):
    return MetricOutput.failure(ErrorKind.INVALID_INPUT,
                                'ratio overflows a finite float')
  return MetricOutput.success(value, denominator=denominator)


def owners_earnings(
    net_income: float,
    depreciation_amortization: float,
    capital_expenditures: float,
    working_capital_change: float,
) -> MetricOutput[float]:
  """
  Compute Owner's Earnings.

  Formula: net income + D&A - capital expenditures - working capital change.
  Any combination of signs is accepted.

  Args:
    net_income: Net income for the period
    depreciation_amortization: Non-cash depreciation and amortization
    capital_expenditures: Capital expenditures (positive outflow)
    working_capital_change: Increase in working capital

  Returns:
    MetricOutput with owner's earnings; INVALID_INPUT for non-finite args
  """
  invalid = check_finite(
      net_income=net_income,
      depreciation_amortization=depreciation_amortization,
      capital_expenditures=capital_expenditures,
      working_capital_change=working_capital_change,
  )
  if invalid is not None:
    return invalid

  value = (net_income + depreciation_amortization - capital_expenditures -
           working_capital_change)
  if not isfinite(value):
    return MetricOutput.failure(ErrorKind.INVALID_INPUT,
                                'owner earnings overflow a finite float')
  return MetricOutput.success(value)


def return_on_equity(net_income: float,
                     shareholders_equity: float) -> MetricOutput[float]:
  """
  Compute Return on Equity as a ratio (0.25 means 25%).

  Negative equity is allowed and yields a sign-reversed ratio; the caller
  interprets it. Zero equity fails with DIVISION_BY_ZERO.
  """
  invalid = check_finite(net_income=net_income,
                         shareholders_equity=shareholders_equity)
  if invalid is not None:
    return invalid
  return _ratio(net_income, shareholders_equity, 'shareholders_equity')


def return_on_net_tangible_assets(
    net_income: float,
    total_assets: float,
    intangible_assets: float,
    total_liabilities: float,
) -> MetricOutput[float]:
  """
  Compute Return on Net Tangible Assets as a ratio.

  Formula: net income / (total assets - intangible assets - liabilities).
  Fails with DIVISION_BY_ZERO when the net tangible asset base is zero.
  """
  invalid = check_finite(
      net_income=net_income,
      total_assets=total_assets,
      intangible_assets=intangible_assets,
      total_liabilities=total_liabilities,
  )
  if invalid is not None:
    return invalid

  net_tangible_assets = total_assets - intangible_assets - total_liabilities
  result = _ratio(net_income, net_tangible_assets, 'net_tangible_assets')
  if not result.ok:
    return result
  return MetricOutput.success(result.value,
                              net_tangible_assets=net_tangible_assets)


def debt_to_equity(total_debt: float,
                   shareholders_equity: float) -> MetricOutput[float]:
  """Compute total debt / shareholders' equity."""
  invalid = check_finite(total_debt=total_debt,
                         shareholders_equity=shareholders_equity)
  if invalid is not None:
    return invalid
  return _ratio(total_debt, shareholders_equity, 'shareholders_equity')


def earnings_per_share(net_income: float,
                       shares_outstanding: float) -> MetricOutput[float]:
  """
  Compute Earnings Per Share.

  Share counts must be strictly positive: zero or negative shares fail
  with INVALID_INPUT rather than DIVISION_BY_ZERO.
  """
  invalid = check_finite(net_income=net_income,
                         shares_outstanding=shares_outstanding)
  if invalid is not None:
    return invalid

  if shares_outstanding <= 0:
    return MetricOutput.failure(
        ErrorKind.INVALID_INPUT,
        f'shares_outstanding must be > 0, got {shares_outstanding}',
        argument='shares_outstanding')
  return _ratio(net_income, shares_outstanding, 'shares_outstanding')


def eps_cagr(eps_initial: float, eps_final: float,
             periods: int) -> MetricOutput[float]:
  """
  Compute the compound annual growth rate between two EPS values.

  Formula: (eps_final / eps_initial)^(1 / periods) - 1

  Args:
    eps_initial: EPS at the start of the window
    eps_final: EPS at the end of the window
    periods: Number of periods (years) between the two, integral and >= 1

  Returns:
    MetricOutput with the CAGR as a ratio. Fails with:
    - INVALID_INPUT if periods is not a positive whole number
    - DIVISION_BY_ZERO if eps_initial is zero
    - INVALID_INPUT if the two EPS values have opposite signs, since a
      negative base has no real fractional power
  """
  invalid = check_finite(eps_initial=eps_initial, eps_final=eps_final)
  if invalid is not None:
    return invalid

  if not is_whole_number(periods) or periods <= 0:
    return MetricOutput.failure(
        ErrorKind.INVALID_INPUT,
        f'periods must be a positive whole number, got {periods!r}',
        argument='periods')

  if eps_initial == 0:
    return MetricOutput.failure(ErrorKind.DIVISION_BY_ZERO,
                                'eps_initial is zero',
                                argument='eps_initial')

  if (eps_initial < 0 < eps_final) or (eps_final < 0 < eps_initial):
    return MetricOutput.failure(
        ErrorKind.INVALID_INPUT,
        'eps_initial and eps_final have opposite signs; growth rate is '
        'undefined',
        eps_initial=eps_initial,
        eps_final=eps_final)

  growth_multiple = eps_final / eps_initial
  try:
    value = growth_multiple**(1.0 / periods) - 1.0
  except OverflowError as e:
    return MetricOutput.failure(ErrorKind.INVALID_INPUT,
                                f'growth rate is not representable: {e}',
                                argument='periods')
  if not isfinite(value):
    return MetricOutput.failure(ErrorKind.INVALID_INPUT,
                                'growth rate overflows a finite float')
  return MetricOutput.success(value,
                              growth_multiple=growth_multiple,
                              periods=int(periods))
