"""
Sensitivity analysis for DCF valuation.

This module provides tools to generate 2D sensitivity tables that show
how intrinsic value per share varies across different discount rates and
terminal growth rates.

CLI Usage:
  python -m buffett_valuation.analysis.sensitivity \\
      --fundamentals company.json \\
      --discount-rates 0.08,0.10,0.12 \\
      --terminal-rates 0.01,0.02,0.03
"""

import argparse
import logging
from pathlib import Path
import sys

import pandas as pd

from buffett_valuation.domain.types import CompanyFundamentals
from buffett_valuation.engine.dcf import intrinsic_value_per_share
from buffett_valuation.engine.dcf import project_cash_flows
from buffett_valuation.engine.metrics import owners_earnings
from buffett_valuation.run import add_scenario_arguments
from buffett_valuation.run import build_config
from buffett_valuation.run import load_fundamentals
from buffett_valuation.scenarios.config import ScenarioConfig

logger = logging.getLogger(__name__)


class SensitivityTableBuilder:
  """
  Build 2D sensitivity tables for intrinsic value analysis.

  Varies discount rate and terminal growth rate while keeping the projected
  cash flows (owner's earnings grown at the scenario's explicit growth rate)
  and the share count fixed.
  """

  def __init__(
      self,
      fundamentals: CompanyFundamentals,
      base_config: ScenarioConfig,
  ):
    """
    Initialize sensitivity table builder.

    Args:
        fundamentals: Company fundamentals
        base_config: Scenario supplying growth rate and horizon

    Raises:
        ValueError: If owner's earnings or the projection cannot be computed
    """
    self.fundamentals = fundamentals
    self.base_config = base_config

    f = fundamentals
    self.oe0 = owners_earnings(f.net_income, f.depreciation_amortization,
                               f.capital_expenditures,
                               f.working_capital_change).unwrap()
    self.cash_flows = project_cash_flows(self.oe0, base_config.growth_rate,
                                         base_config.n_years).unwrap()
    self.shares = f.shares_outstanding

    logger.info('Initialized SensitivityTableBuilder for %s', f.ticker)
    logger.info('  OE0: $%s', f'{self.oe0:,.0f}')
    logger.info('  Shares: %s', f'{self.shares:,.0f}')
    logger.info('  Explicit growth: %.2f%% over %d years',
                base_config.growth_rate * 100, base_config.n_years)

  def build(
      self,
      discount_rates: list[float],
      terminal_growth_rates: list[float],
  ) -> pd.DataFrame:
    """
    Build 2D sensitivity table.

    Args:
        discount_rates: List of discount rates (e.g., [0.08, 0.10, 0.12])
        terminal_growth_rates: List of terminal growth rates
                               (e.g., [0.01, 0.02, 0.03])

    Returns:
        DataFrame with discount rates as index, terminal growth rates as
        columns, and intrinsic values per share as cell values. Combinations
        the engine rejects (e.g. r <= g) are missing values.
    """
    if not discount_rates:
      raise ValueError('discount_rates cannot be empty')
    if not terminal_growth_rates:
      raise ValueError('terminal_growth_rates cannot be empty')

    logger.info('Building sensitivity table: %d x %d', len(discount_rates),
                len(terminal_growth_rates))

    data_rows = []
    for r in discount_rates:
      row_data = []
      for g in terminal_growth_rates:
        output = intrinsic_value_per_share(self.cash_flows, r, g, self.shares)
        if not output.ok:
          logger.debug('r=%.4f g=%.4f rejected: %s', r, g, output.reason)
        row_data.append(output.value_or(float('nan')))
      data_rows.append(row_data)

    r_labels = [f'{r:.1%}' for r in discount_rates]
    g_labels = [f'{g:.1%}' for g in terminal_growth_rates]

    df = pd.DataFrame(data_rows, index=r_labels, columns=g_labels)
    df.index.name = 'Discount Rate'
    df.columns.name = 'Terminal Growth'

    logger.info('Sensitivity table built successfully')
    return df


def _parse_float_list(s: str) -> list[float]:
  """Parse comma-separated float list."""
  return [float(x.strip()) for x in s.split(',')]


def _frange(start: float, stop: float, step: float) -> list[float]:
  """
  Inclusive float range with rounding.

  Args:
      start: Start value
      stop: Stop value (inclusive)
      step: Step size

  Returns:
      List of floats from start to stop (inclusive)
  """
  if step <= 0:
    raise ValueError('step must be > 0')
  n = int(round((stop - start) / step))
  if n < 0:
    return []
  return [round(start + k * step, 12) for k in range(n + 1)]


def main() -> int:
  """CLI entrypoint for sensitivity analysis."""
  parser = argparse.ArgumentParser(
      description='DCF Sensitivity Analysis',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  # Basic usage with explicit rates
  python -m buffett_valuation.analysis.sensitivity \\
      --fundamentals ko.json \\
      --discount-rates 0.08,0.10,0.12 \\
      --terminal-rates 0.01,0.02,0.03

  # Using range specification
  python -m buffett_valuation.analysis.sensitivity \\
      --fundamentals ko.json \\
      --discount-min 0.08 --discount-max 0.12 --discount-step 0.01 \\
      --terminal-min 0.00 --terminal-max 0.04 --terminal-step 0.01
      """)

  parser.add_argument('--fundamentals',
                      type=Path,
                      required=True,
                      help='JSON file with company fundamentals')
  add_scenario_arguments(parser)

  # Option 1: Explicit lists
  parser.add_argument('--discount-rates',
                      type=str,
                      help='Comma-separated discount rates (e.g., 0.08,0.10)')
  parser.add_argument('--terminal-rates',
                      type=str,
                      help='Comma-separated terminal growth rates')

  # Option 2: Range specification
  parser.add_argument('--discount-min',
                      type=float,
                      help='Minimum discount rate')
  parser.add_argument('--discount-max',
                      type=float,
                      help='Maximum discount rate')
  parser.add_argument('--discount-step',
                      type=float,
                      default=0.01,
                      help='Discount rate step (default: 0.01)')

  parser.add_argument('--terminal-min',
                      type=float,
                      help='Minimum terminal growth rate')
  parser.add_argument('--terminal-max',
                      type=float,
                      help='Maximum terminal growth rate')
  parser.add_argument('--terminal-step',
                      type=float,
                      default=0.01,
                      help='Terminal growth rate step (default: 0.01)')

  parser.add_argument('--output', type=Path, help='Output CSV path (optional)')

  parser.add_argument('--verbose',
                      '-v',
                      action='store_true',
                      help='Verbose output')

  args = parser.parse_args()

  logging.basicConfig(
      level=logging.DEBUG if args.verbose else logging.INFO,
      format='%(asctime)s [%(levelname)s] %(message)s',
      datefmt='%Y-%m-%d %H:%M:%S',
  )

  try:
    fundamentals = load_fundamentals(args.fundamentals)
  except (FileNotFoundError, ValueError) as e:
    logger.error('%s', e)
    return 1

  config = build_config(args)
  logger.info('Using scenario: %s', config.name)

  if args.discount_rates:
    discount_rates = _parse_float_list(args.discount_rates)
  elif args.discount_min is not None and args.discount_max is not None:
    discount_rates = _frange(args.discount_min, args.discount_max,
                             args.discount_step)
  else:
    discount_rates = [0.08, 0.10, 0.12]
    logger.warning('No discount rates specified, using default: %s',
                   discount_rates)

  if args.terminal_rates:
    terminal_rates = _parse_float_list(args.terminal_rates)
  elif args.terminal_min is not None and args.terminal_max is not None:
    terminal_rates = _frange(args.terminal_min, args.terminal_max,
                             args.terminal_step)
  else:
    terminal_rates = [0.01, 0.02, 0.03]
    logger.warning('No terminal growth rates specified, using default: %s',
                   terminal_rates)

  logger.info('Discount rates: %s', discount_rates)
  logger.info('Terminal growth rates: %s', terminal_rates)

  try:
    builder = SensitivityTableBuilder(fundamentals, config)
  except ValueError as e:
    logger.error('Cannot build sensitivity table for %s: %s',
                 fundamentals.ticker, e)
    return 1

  table = builder.build(
      discount_rates=discount_rates,
      terminal_growth_rates=terminal_rates,
  )

  separator = '=' * 80
  logger.info(separator)
  logger.info('Intrinsic Value per Share ($): %s', fundamentals.ticker)
  logger.info(separator)
  logger.info('\n%s',
              table.to_string(float_format=lambda x: f'${x:.2f}',
                              na_rep='n/a'))
  logger.info(separator)

  if args.output:
    table.to_csv(args.output)
    logger.info('Saved to: %s', args.output)
  return 0


if __name__ == '__main__':
  sys.exit(main())
