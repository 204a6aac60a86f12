import math

import pytest

from buffett_valuation.domain.errors import InvalidInputError
from buffett_valuation.domain.types import ErrorKind
from buffett_valuation.engine.dcf import compute_pv_explicit
from buffett_valuation.engine.dcf import compute_terminal_value
from buffett_valuation.engine.dcf import intrinsic_value
from buffett_valuation.engine.dcf import intrinsic_value_per_share
from buffett_valuation.engine.dcf import margin_of_safety
from buffett_valuation.engine.dcf import MAX_PROJECTION_PERIODS
from buffett_valuation.engine.dcf import project_cash_flows


class TestComputePVExplicit:
  """Tests for compute_pv_explicit function."""

  def test_flat_cash_flows(self):
    """Manual calculation:
    Year 1: 100/1.1    = 90.909
    Year 2: 100/1.21   = 82.645
    Year 3: 100/1.331  = 75.131
    Total PV: 248.685
    """
    pv = compute_pv_explicit([100.0, 100.0, 100.0], 0.10)

    assert pv == pytest.approx(248.685, abs=0.001)

  def test_zero_discount_rate(self):
    assert compute_pv_explicit([10.0, 20.0, 30.0], 0.0) == 60.0

  def test_growing_earnings_matches_closed_form(self):
    """1000 growing 5% for 10 years discounted at 10%."""
    flows = [1000.0 * 1.05**t for t in range(1, 11)]

    pv = compute_pv_explicit(flows, 0.10)

    assert pv == pytest.approx(7811.80275662085, rel=1e-9)


class TestComputeTerminalValue:
  """Tests for compute_terminal_value function."""

  def test_normal_case(self):
    """Standard Gordon growth calculation.

    Manual calculation:
    TV = (10.0 * 1.03) / (0.10 - 0.03) = 10.3 / 0.07 = 147.1429
    PV = 147.1429 / (1.10^5) = 147.1429 / 1.61051 = 91.364
    """
    tv, discounted = compute_terminal_value(
        final_cash_flow=10.0,
        terminal_growth_rate=0.03,
        discount_rate=0.10,
        final_period=5,
    )

    assert tv == pytest.approx(147.1429, abs=0.001)
    assert discounted == pytest.approx(91.364, abs=0.001)

  def test_zero_terminal_growth(self):
    """TV = 10 / 0.10 = 100, PV = 100 / 1.61051 = 62.092."""
    _, discounted = compute_terminal_value(10.0, 0.0, 0.10, 5)

    assert discounted == pytest.approx(62.092, abs=0.001)

  def test_different_final_periods(self):
    _, tv_3y = compute_terminal_value(10.0, 0.03, 0.10, 3)
    _, tv_5y = compute_terminal_value(10.0, 0.03, 0.10, 5)
    _, tv_10y = compute_terminal_value(10.0, 0.03, 0.10, 10)

    assert tv_3y > tv_5y > tv_10y


class TestIntrinsicValue:
  """Tests for intrinsic_value function."""

  def test_reference_three_year_case(self):
    """Explicit PV plus discounted Gordon terminal value."""
    expected = (100 / 1.1 + 100 / 1.1**2 + 100 / 1.1**3 +
                100 * 1.02 / (0.10 - 0.02) / 1.1**3)

    result = intrinsic_value([100.0, 100.0, 100.0], 0.10, 0.02)

    assert result.ok
    assert result.value == pytest.approx(expected, rel=1e-9)

  def test_diagnostics_split(self):
    result = intrinsic_value([100.0, 100.0, 100.0], 0.10, 0.02)

    assert result.diag['n_periods'] == 3
    assert result.diag['pv_explicit'] == pytest.approx(248.685, abs=0.001)
    assert result.diag['terminal_value'] == pytest.approx(1275.0)
    assert result.diag['tv_component'] == pytest.approx(1275.0 / 1.331)
    assert result.value == pytest.approx(result.diag['pv_explicit'] +
                                         result.diag['tv_component'])

  def test_single_period(self):
    """PV = 110/1.1 + (110 * 1.0 / 0.1) / 1.1 = 100 + 1000."""
    result = intrinsic_value([110.0], 0.10, 0.0)

    assert result.value == pytest.approx(1100.0)

  def test_terminal_uses_last_cash_flow(self):
    front_loaded = intrinsic_value([500.0, 100.0], 0.10, 0.02)
    back_loaded = intrinsic_value([100.0, 500.0], 0.10, 0.02)

    assert back_loaded.diag['terminal_value'] > (
        front_loaded.diag['terminal_value'])

  def test_negative_cash_flows(self):
    result = intrinsic_value([-100.0, -50.0], 0.10, 0.02)

    assert result.ok
    assert result.value < 0

  def test_tuple_input(self):
    assert intrinsic_value((100.0, 100.0, 100.0), 0.10, 0.02) == (
        intrinsic_value([100.0, 100.0, 100.0], 0.10, 0.02))

  @pytest.mark.parametrize('rate,growth', [(0.10, 0.02), (0.05, 0.0),
                                           (-2.0, -3.0)])
  def test_empty_cash_flows(self, rate, growth):
    result = intrinsic_value([], rate, growth)

    assert result.error is ErrorKind.INVALID_INPUT
    assert result.diag['argument'] == 'cash_flows'

  def test_discount_equals_terminal_growth(self):
    result = intrinsic_value([100.0, 100.0], 0.05, 0.05)

    assert result.error is ErrorKind.INVALID_INPUT
    assert 'must exceed' in result.reason

  def test_discount_below_terminal_growth(self):
    result = intrinsic_value([100.0, 100.0], 0.05, 0.08)

    assert result.error is ErrorKind.INVALID_INPUT

  @pytest.mark.parametrize('rate', [-1.0, -1.5])
  def test_discount_rate_not_above_minus_one(self, rate):
    result = intrinsic_value([100.0], rate, -3.0)

    assert result.error is ErrorKind.INVALID_INPUT
    assert 'must be > -1' in result.reason

  def test_nan_cash_flow(self):
    result = intrinsic_value([100.0, float('nan'), 100.0], 0.10, 0.02)

    assert result.error is ErrorKind.INVALID_INPUT
    assert 'period 2' in result.reason

  def test_infinite_discount_rate(self):
    result = intrinsic_value([100.0], float('inf'), 0.02)

    assert result.error is ErrorKind.INVALID_INPUT

  def test_discount_factor_overflow(self):
    """11^400 does not fit in a float."""
    result = intrinsic_value([100.0] * 400, 10.0, 0.02)

    assert result.error is ErrorKind.INVALID_INPUT
    assert result.diag['argument'] == 'discount_rate'

  def test_discount_factor_underflow(self):
    """(1 + r)^t rounds to zero when r is just above -1."""
    result = intrinsic_value([100.0] * 100, -0.9999999999, -2.0)

    assert result.error is ErrorKind.INVALID_INPUT
    assert result.value is None

  def test_discount_factor_overflow_per_share(self):
    result = intrinsic_value_per_share([100.0] * 400, 10.0, 0.02, 100.0)

    assert result.error is ErrorKind.INVALID_INPUT

  def test_unwrap_raises(self):
    with pytest.raises(InvalidInputError, match='must not be empty'):
      intrinsic_value([], 0.10, 0.02).unwrap()

  def test_higher_discount_rate_lowers_value(self):
    flows = [100.0] * 5
    low = intrinsic_value(flows, 0.08, 0.02).value
    high = intrinsic_value(flows, 0.12, 0.02).value

    assert low > high


class TestIntrinsicValuePerShare:
  """Tests for intrinsic_value_per_share function."""

  def test_divides_by_shares(self):
    total = intrinsic_value([100.0, 100.0, 100.0], 0.10, 0.02)
    per_share = intrinsic_value_per_share([100.0, 100.0, 100.0], 0.10, 0.02,
                                          10.0)

    assert per_share.value == pytest.approx(total.value / 10.0)
    assert per_share.diag['intrinsic_value'] == total.value
    assert per_share.diag['shares_outstanding'] == 10.0
    assert per_share.diag['pv_explicit'] == total.diag['pv_explicit']

  def test_growing_earnings_reference(self):
    """Explicit part of 1000 growing 5%, 10 years, 10% discount, 100 shares.

    The explicit-period PV alone is 7811.80, i.e. 78.12 per share; the
    terminal value at 0% growth adds more on top.
    """
    flows = project_cash_flows(1000.0, 0.05, 10).value
    result = intrinsic_value_per_share(flows, 0.10, 0.0, 100.0)

    assert result.diag['pv_explicit'] / 100.0 == pytest.approx(78.118,
                                                                abs=0.001)
    assert result.value > 78.118

  @pytest.mark.parametrize('shares', [0.0, -100.0])
  def test_non_positive_shares(self, shares):
    """Fails even though intrinsic_value itself succeeds."""
    assert intrinsic_value([100.0, 100.0], 0.10, 0.02).ok

    result = intrinsic_value_per_share([100.0, 100.0], 0.10, 0.02, shares)

    assert result.error is ErrorKind.INVALID_INPUT
    assert result.diag['argument'] == 'shares_outstanding'

  def test_nan_shares(self):
    result = intrinsic_value_per_share([100.0], 0.10, 0.02, float('nan'))

    assert result.error is ErrorKind.INVALID_INPUT

  def test_propagates_intrinsic_value_failure_unchanged(self):
    """Underlying failure is returned as-is, ahead of the share check."""
    underlying = intrinsic_value([100.0], 0.05, 0.05)
    result = intrinsic_value_per_share([100.0], 0.05, 0.05, 0.0)

    assert result == underlying

  def test_empty_cash_flows_with_valid_shares(self):
    result = intrinsic_value_per_share([], 0.10, 0.02, 100.0)

    assert result.error is ErrorKind.INVALID_INPUT
    assert result.diag['argument'] == 'cash_flows'


class TestProjectCashFlows:
  """Tests for project_cash_flows function."""

  def test_constant_growth(self):
    result = project_cash_flows(100.0, 0.10, 3)

    assert result.value == pytest.approx([110.0, 121.0, 133.1])

  def test_zero_growth(self):
    assert project_cash_flows(100.0, 0.0, 4).value == [100.0] * 4

  def test_decline(self):
    result = project_cash_flows(100.0, -0.5, 2)

    assert result.value == pytest.approx([50.0, 25.0])

  @pytest.mark.parametrize('periods', [0, -3, 1.5, False])
  def test_invalid_periods(self, periods):
    result = project_cash_flows(100.0, 0.05, periods)

    assert result.error is ErrorKind.INVALID_INPUT

  @pytest.mark.parametrize('periods', [MAX_PROJECTION_PERIODS + 1, 10**400])
  def test_too_many_periods(self, periods):
    result = project_cash_flows(100.0, 0.0, periods)

    assert result.error is ErrorKind.INVALID_INPUT
    assert result.diag['argument'] == 'periods'

  def test_longest_projection(self):
    result = project_cash_flows(100.0, 0.0, MAX_PROJECTION_PERIODS)

    assert len(result.value) == MAX_PROJECTION_PERIODS

  def test_growth_rate_at_minus_one(self):
    result = project_cash_flows(100.0, -1.0, 3)

    assert result.error is ErrorKind.INVALID_INPUT
    assert result.diag['argument'] == 'growth_rate'

  def test_nan_base(self):
    result = project_cash_flows(float('nan'), 0.05, 3)

    assert result.error is ErrorKind.INVALID_INPUT


class TestMarginOfSafety:
  """Tests for margin_of_safety function."""

  def test_undervalued(self):
    result = margin_of_safety(100.0, 60.0)

    assert result.value == pytest.approx(0.40)
    assert result.diag['price_to_iv'] == pytest.approx(0.60)

  def test_overvalued(self):
    assert margin_of_safety(100.0, 150.0).value == pytest.approx(-0.50)

  def test_zero_intrinsic_value(self):
    result = margin_of_safety(0.0, 10.0)

    assert result.error is ErrorKind.DIVISION_BY_ZERO

  @pytest.mark.parametrize('price', [0.0, -5.0, float('nan')])
  def test_invalid_price(self, price):
    result = margin_of_safety(100.0, price)

    assert result.error is ErrorKind.INVALID_INPUT


class TestNoNaNResults:
  """Successful outputs are always finite."""

  def test_successful_outputs_are_finite(self):
    outputs = [
        intrinsic_value([100.0] * 3, 0.10, 0.02),
        intrinsic_value_per_share([100.0] * 3, 0.10, 0.02, 7.0),
        project_cash_flows(100.0, 0.05, 5),
        margin_of_safety(100.0, 60.0),
    ]
    for output in outputs:
      assert output.ok
      values = output.value if isinstance(output.value, list) else [
          output.value
      ]
      assert all(math.isfinite(v) for v in values)
