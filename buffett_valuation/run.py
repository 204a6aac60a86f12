'''
Single-company valuation entrypoint.

This module composes the pure engine into a full report. It:
1. Computes owner's earnings and the balance-sheet ratios
2. Computes EPS and EPS CAGR over the supplied history
3. Projects owner's earnings over the scenario horizon
4. Runs the DCF engine and compares against the market price
5. Returns ValuationResult with failures recorded in diagnostics

Usage:
  from buffett_valuation.run import run_valuation
  from buffett_valuation.scenarios.config import ScenarioConfig

  result = run_valuation(fundamentals, ScenarioConfig.default())
  print(f"IV: ${result.iv_per_share:.2f}")

CLI:
  python -m buffett_valuation.run --fundamentals company.json \\
      --scenario conservative --discount-rate 0.11
'''

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import Any, Optional

from buffett_valuation.domain.types import (
    CompanyFundamentals,
    MetricOutput,
    ValuationResult,
)
from buffett_valuation.engine import dcf
from buffett_valuation.engine import metrics
from buffett_valuation.scenarios.config import get_preset
from buffett_valuation.scenarios.config import PRESETS
from buffett_valuation.scenarios.config import ScenarioConfig

logger = logging.getLogger(__name__)


def _record(
    result: ValuationResult,
    name: str,
    output: MetricOutput,
) -> Optional[Any]:
  '''Store a metric on the result, or its failure in diagnostics.'''
  if output.ok:
    setattr(result, name, output.value)
    return output.value
  _record_failure(result, name, output)
  return None


def _record_failure(
    result: ValuationResult,
    name: str,
    output: MetricOutput,
) -> None:
  result.diag[f'{name}_error'] = output.error.value
  result.diag[f'{name}_reason'] = output.reason
  logger.debug('%s: %s failed (%s): %s', result.ticker, name,
               output.error.value, output.reason)


def load_fundamentals(path: Path) -> CompanyFundamentals:
  '''
  Load company fundamentals from a JSON file.

  Raises:
    FileNotFoundError: If the file does not exist
    ValueError: If the file is not valid JSON or misses required fields
  '''
  if not path.exists():
    raise FileNotFoundError(f'Fundamentals file not found: {path}')

  with open(path, 'r', encoding='utf-8') as f:
    try:
      data = json.load(f)
    except json.JSONDecodeError as e:
      raise ValueError(f'Invalid JSON in {path}: {e}') from e

  if not isinstance(data, dict):
    raise ValueError(f'Expected a JSON object in {path}')
  return CompanyFundamentals.from_dict(data)


def run_valuation(
    fundamentals: CompanyFundamentals,
    config: Optional[ScenarioConfig] = None,
) -> ValuationResult:
  '''
  Run all metrics and the DCF valuation for a single company.

  Domain failures never raise: the failing metric is left as None and the
  error kind and reason are recorded in result.diag.

  Args:
    fundamentals: Already-parsed company figures
    config: ScenarioConfig (default: ScenarioConfig.default())

  Returns:
    ValuationResult with every computable metric filled in
  '''
  if config is None:
    config = ScenarioConfig.default()

  f = fundamentals
  result = ValuationResult(ticker=f.ticker, scenario=config.name)
  result.diag.update({
      'discount_rate': config.discount_rate,
      'terminal_growth_rate': config.terminal_growth_rate,
      'growth_rate': config.growth_rate,
      'n_years': config.n_years,
  })

  oe0 = _record(
      result, 'owners_earnings',
      metrics.owners_earnings(f.net_income, f.depreciation_amortization,
                              f.capital_expenditures,
                              f.working_capital_change))
  _record(result, 'return_on_equity',
          metrics.return_on_equity(f.net_income, f.shareholders_equity))
  _record(
      result, 'return_on_net_tangible_assets',
      metrics.return_on_net_tangible_assets(f.net_income, f.total_assets,
                                            f.intangible_assets,
                                            f.total_liabilities))
  _record(result, 'debt_to_equity',
          metrics.debt_to_equity(f.total_debt, f.shareholders_equity))
  _record(result, 'earnings_per_share',
          metrics.earnings_per_share(f.net_income, f.shares_outstanding))

  if len(f.eps_history) >= 2:
    _record(
        result, 'eps_cagr',
        metrics.eps_cagr(f.eps_history[0], f.eps_history[-1],
                         len(f.eps_history) - 1))
  else:
    result.diag['eps_cagr_skipped'] = 'insufficient_history'

  if oe0 is None:
    logger.debug('%s: no owner earnings, skipping DCF', f.ticker)
    return result

  projection = dcf.project_cash_flows(oe0, config.growth_rate, config.n_years)
  if not projection.ok:
    _record_failure(result, 'projection', projection)
    return result

  iv_output = dcf.intrinsic_value_per_share(projection.value,
                                            config.discount_rate,
                                            config.terminal_growth_rate,
                                            f.shares_outstanding)
  if not iv_output.ok:
    _record_failure(result, 'iv_per_share', iv_output)
    return result

  result.iv_per_share = iv_output.value
  result.intrinsic_value = iv_output.diag['intrinsic_value']
  result.pv_explicit = iv_output.diag['pv_explicit']
  result.tv_component = iv_output.diag['tv_component']

  if f.market_price is not None:
    result.market_price = f.market_price
    mos_output = dcf.margin_of_safety(iv_output.value, f.market_price)
    if _record(result, 'margin_of_safety', mos_output) is not None:
      result.price_to_iv = mos_output.diag['price_to_iv']

  return result


def _pct(value: Optional[float]) -> str:
  return 'n/a' if value is None else f'{value * 100:.2f}%'


def _money(value: Optional[float]) -> str:
  return 'n/a' if value is None else f'${value:,.2f}'


def log_report(result: ValuationResult, config: ScenarioConfig) -> None:
  '''Log a human-readable valuation report at INFO level.'''
  separator = '=' * 70
  logger.info(separator)
  logger.info('Buffett Valuation - %s', result.ticker)
  logger.info('Scenario: %s', config.name)
  logger.info(separator)

  logger.info('Assumptions:')
  logger.info('  Discount Rate (r): %.2f%%', config.discount_rate * 100)
  logger.info('  Terminal Growth (g): %.2f%%',
              config.terminal_growth_rate * 100)
  logger.info('  Explicit Growth: %.2f%% over %d years',
              config.growth_rate * 100, config.n_years)

  logger.info('Fundamentals:')
  logger.info('  Owner Earnings: %s', _money(result.owners_earnings))
  logger.info('  ROE: %s', _pct(result.return_on_equity))
  logger.info('  RONTA: %s', _pct(result.return_on_net_tangible_assets))
  if result.debt_to_equity is None:
    logger.info('  Debt/Equity: n/a')
  else:
    logger.info('  Debt/Equity: %.2f', result.debt_to_equity)
  logger.info('  EPS: %s', _money(result.earnings_per_share))
  logger.info('  EPS CAGR: %s', _pct(result.eps_cagr))

  logger.info('Valuation:')
  logger.info('  Intrinsic Value: %s', _money(result.intrinsic_value))
  logger.info('  PV Explicit: %s', _money(result.pv_explicit))
  logger.info('  TV Component: %s', _money(result.tv_component))
  logger.info('  IV per Share: %s', _money(result.iv_per_share))

  if result.market_price is not None:
    logger.info('Market Comparison:')
    logger.info('  Market Price: %s', _money(result.market_price))
    logger.info('  Price/IV: %s', _pct(result.price_to_iv))
    logger.info('  Margin of Safety: %s', _pct(result.margin_of_safety))

  for name in result.failed_metrics:
    logger.warning('%s unavailable: %s', name,
                   result.diag.get(f'{name}_reason'))

  logger.info(separator)


def build_config(args: argparse.Namespace) -> ScenarioConfig:
  '''Resolve the scenario preset and apply CLI overrides.'''
  return get_preset(args.scenario).with_overrides(
      discount_rate=args.discount_rate,
      terminal_growth_rate=args.terminal_growth,
      growth_rate=args.growth_rate,
      n_years=args.years,
  )


def add_scenario_arguments(parser: argparse.ArgumentParser) -> None:
  '''Add the scenario preset and rate override flags.'''
  parser.add_argument(
      '--scenario',
      type=str,
      default='default',
      choices=sorted(PRESETS),
      help='Scenario preset',
  )
  parser.add_argument('--discount-rate',
                      type=float,
                      help='Override discount rate (e.g., 0.10)')
  parser.add_argument('--terminal-growth',
                      type=float,
                      help='Override terminal growth rate (e.g., 0.03)')
  parser.add_argument('--growth-rate',
                      type=float,
                      help='Override explicit-period growth rate')
  parser.add_argument('--years',
                      type=int,
                      help='Override number of explicit forecast years')


def main(argv: Optional[list] = None) -> int:
  '''CLI entrypoint.'''
  parser = argparse.ArgumentParser(description='Run Buffett-style valuation')
  parser.add_argument('--fundamentals',
                      type=Path,
                      required=True,
                      help='JSON file with company fundamentals')
  add_scenario_arguments(parser)
  parser.add_argument('-v',
                      '--verbose',
                      action='store_true',
                      help='Verbose output')
  args = parser.parse_args(argv)

  if args.verbose:
    logging.getLogger().setLevel(logging.DEBUG)

  try:
    fundamentals = load_fundamentals(args.fundamentals)
  except (FileNotFoundError, ValueError) as e:
    logger.error('%s', e)
    return 1

  config = build_config(args)
  result = run_valuation(fundamentals, config)
  log_report(result, config)
  return 0


if __name__ == '__main__':
  logging.basicConfig(
      level=logging.INFO,
      format='%(message)s',
  )
  sys.exit(main())
