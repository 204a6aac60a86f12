"""
Pure DCF math engine.

This module contains pure functions for discounted cash flow valuation. No
pandas, no I/O, just numeric computations on caller-supplied cash flows and
rates.

Key functions:
  intrinsic_value: Two-stage DCF (explicit flows + Gordon terminal value)
  intrinsic_value_per_share: intrinsic_value divided by shares outstanding
  project_cash_flows: Constant-growth projection of a base cash flow
  compute_pv_explicit: PV of explicit forecast period (unchecked)
  compute_terminal_value: Discounted Gordon growth terminal value (unchecked)
  margin_of_safety: Discount of market price to intrinsic value
"""

from collections.abc import Sequence
from math import isfinite

from buffett_valuation.domain.types import ErrorKind, MetricOutput
from buffett_valuation.engine.metrics import check_finite, is_whole_number

# Longest explicit projection project_cash_flows will build.
MAX_PROJECTION_PERIODS = 1000


def compute_pv_explicit(
    cash_flows: Sequence[float],
    discount_rate: float,
) -> float:
  """
  Compute present value of the explicit forecast period.

  Args:
    cash_flows: Projected cash flows [cf1, cf2, ..., cfN]
    discount_rate: Required return (r)

  Returns:
    Sum of cf_t / (1 + r)^t for t = 1..N
  """
  pv = 0.0
  for t, cf in enumerate(cash_flows, start=1):
    pv += cf / ((1.0 + discount_rate)**t)
  return pv


def compute_terminal_value(
    final_cash_flow: float,
    terminal_growth_rate: float,
    discount_rate: float,
    final_period: int,
) -> tuple[float, float]:
  """
  Compute terminal value using the Gordon Growth Model.

  Args:
    final_cash_flow: Cash flow in the final explicit period
    terminal_growth_rate: Perpetual growth rate (g)
    discount_rate: Required return (r), must exceed g
    final_period: Number of periods to discount back

  Returns:
    Tuple of (terminal_value, discounted_terminal_value)
  """
  tv = (final_cash_flow *
        (1.0 + terminal_growth_rate)) / (discount_rate - terminal_growth_rate)
  return tv, tv / ((1.0 + discount_rate)**final_period)


def intrinsic_value(
    cash_flows: Sequence[float],
    discount_rate: float,
    terminal_growth_rate: float,
) -> MetricOutput[float]:
  """
  Compute intrinsic value using a two-stage DCF model.

  Stage 1: Each projected cash flow discounted by (1 + r)^t, t from 1
  Stage 2: Gordon growth terminal value on the last cash flow, discounted
           back by (1 + r)^N

  Args:
    cash_flows: Projected cash flows, one per future period
    discount_rate: Required return (r)
    terminal_growth_rate: Perpetual growth rate after the last period (g)

  Returns:
    MetricOutput with the total intrinsic value. Diagnostics include
    pv_explicit, tv_component, terminal_value and n_periods. Fails with
    INVALID_INPUT for an empty sequence, non-finite inputs, r <= -1,
    r <= g, or a discount factor (1 + r)^N outside the float range.
  """
  if len(cash_flows) == 0:
    return MetricOutput.failure(ErrorKind.INVALID_INPUT,
                                'cash_flows must not be empty',
                                argument='cash_flows')

  for t, cf in enumerate(cash_flows, start=1):
    if not isfinite(cf):
      return MetricOutput.failure(
          ErrorKind.INVALID_INPUT,
          f'cash flow for period {t} must be a finite number, got {cf}',
          argument='cash_flows')

  invalid = check_finite(discount_rate=discount_rate,
                         terminal_growth_rate=terminal_growth_rate)
  if invalid is not None:
    return invalid

  if discount_rate <= -1:
    return MetricOutput.failure(
        ErrorKind.INVALID_INPUT,
        f'discount_rate must be > -1, got {discount_rate}',
        argument='discount_rate')

  if discount_rate <= terminal_growth_rate:
    return MetricOutput.failure(
        ErrorKind.INVALID_INPUT,
        f'discount_rate ({discount_rate}) must exceed terminal_growth_rate '
        f'({terminal_growth_rate})',
        argument='discount_rate')

  n_periods = len(cash_flows)
  try:
    pv_explicit = compute_pv_explicit(cash_flows, discount_rate)
    terminal_value, tv_component = compute_terminal_value(
        cash_flows[-1], terminal_growth_rate, discount_rate, n_periods)
  except (OverflowError, ZeroDivisionError) as e:
    # (1 + r)^t leaves the float range for large r or r close to -1.
    return MetricOutput.failure(
        ErrorKind.INVALID_INPUT,
        f'discount factor over {n_periods} periods is not representable: '
        f'{e}',
        argument='discount_rate')

  total = pv_explicit + tv_component
  if not isfinite(total):
    return MetricOutput.failure(ErrorKind.INVALID_INPUT,
                                'intrinsic value overflows a finite float')

  return MetricOutput.success(total,
                              pv_explicit=pv_explicit,
                              tv_component=tv_component,
                              terminal_value=terminal_value,
                              n_periods=n_periods)


def intrinsic_value_per_share(
    cash_flows: Sequence[float],
    discount_rate: float,
    terminal_growth_rate: float,
    shares_outstanding: float,
) -> MetricOutput[float]:
  """
  Compute intrinsic value per share.

  Runs intrinsic_value first and returns any failure from it unchanged;
  only then is shares_outstanding checked (must be finite and > 0).
  """
  total = intrinsic_value(cash_flows, discount_rate, terminal_growth_rate)
  if not total.ok:
    return total

  invalid = check_finite(shares_outstanding=shares_outstanding)
  if invalid is not None:
    return invalid

  if shares_outstanding <= 0:
    return MetricOutput.failure(
        ErrorKind.INVALID_INPUT,
        f'shares_outstanding must be > 0, got {shares_outstanding}',
        argument='shares_outstanding')

  return MetricOutput.success(total.value / shares_outstanding,
                              intrinsic_value=total.value,
                              shares_outstanding=shares_outstanding,
                              **total.diag)


def project_cash_flows(
    initial_cash_flow: float,
    growth_rate: float,
    periods: int,
) -> MetricOutput[list[float]]:
  """
  Project a base cash flow forward at a constant growth rate.

  Returns [cf0 * (1 + g)^t for t = 1..periods]; the base itself is not
  included.

  Args:
    initial_cash_flow: Current owner's earnings or free cash flow (cf0)
    growth_rate: Annual growth rate (g), must be > -1
    periods: Number of periods to project, a positive whole number
      no larger than MAX_PROJECTION_PERIODS
  """
  invalid = check_finite(initial_cash_flow=initial_cash_flow,
                         growth_rate=growth_rate)
  if invalid is not None:
    return invalid

  if not is_whole_number(periods) or periods <= 0:
    return MetricOutput.failure(
        ErrorKind.INVALID_INPUT,
        f'periods must be a positive whole number, got {periods!r}',
        argument='periods')

  if periods > MAX_PROJECTION_PERIODS:
    return MetricOutput.failure(
        ErrorKind.INVALID_INPUT,
        f'periods must be at most {MAX_PROJECTION_PERIODS}, got {periods!r}',
        argument='periods')

  if growth_rate <= -1:
    return MetricOutput.failure(ErrorKind.INVALID_INPUT,
                                f'growth_rate must be > -1, got {growth_rate}',
                                argument='growth_rate')

  flows = []
  cf = initial_cash_flow
  for _ in range(int(periods)):
    cf *= (1.0 + growth_rate)
    flows.append(cf)

  if not isfinite(flows[-1]):
    return MetricOutput.failure(ErrorKind.INVALID_INPUT,
                                'projected cash flow overflows a finite float')
  return MetricOutput.success(flows, growth_rate=growth_rate)


def margin_of_safety(
    iv_per_share: float,
    market_price: float,
) -> MetricOutput[float]:
  """
  Compute margin of safety: (IV - price) / IV.

  Positive when the market price is below intrinsic value.
  """
  invalid = check_finite(iv_per_share=iv_per_share, market_price=market_price)
  if invalid is not None:
    return invalid

  if market_price <= 0:
    return MetricOutput.failure(ErrorKind.INVALID_INPUT,
                                f'market_price must be > 0, got {market_price}',
                                argument='market_price')

  if iv_per_share == 0:
    return MetricOutput.failure(ErrorKind.DIVISION_BY_ZERO,
                                'iv_per_share is zero',
                                argument='iv_per_share')

  value = (iv_per_share - market_price) / iv_per_share
  return MetricOutput.success(value, price_to_iv=market_price / iv_per_share)
