'''
Batch valuation for multiple companies under one scenario.

This module provides tools to:
1. Run valuations for many companies at once
2. Compare metrics across companies
3. Export results to CSV for further analysis

Usage (CLI):
  python -m buffett_valuation.analysis.batch_valuation \
    --companies data/companies.json \
    --scenario conservative \
    --output results/valuation.csv \
    -v

Usage (Python API):
  from buffett_valuation.analysis.batch_valuation import batch_valuation
  from buffett_valuation.scenarios.config import ScenarioConfig

  df = batch_valuation(companies, ScenarioConfig.default())
  df.to_csv('results.csv', index=False)
'''

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import Iterable, List

import pandas as pd

from buffett_valuation.domain.types import CompanyFundamentals
from buffett_valuation.run import add_scenario_arguments
from buffett_valuation.run import build_config
from buffett_valuation.run import run_valuation
from buffett_valuation.scenarios.config import ScenarioConfig

logger = logging.getLogger(__name__)


def batch_valuation(
    companies: Iterable[CompanyFundamentals],
    config: ScenarioConfig,
    verbose: bool = False,
) -> pd.DataFrame:
  '''
  Run valuation for multiple companies.

  Args:
    companies: Company fundamentals to value
    config: ScenarioConfig with the rates to apply
    verbose: Log one line per company

  Returns:
    DataFrame with one row per company and the columns of
    ValuationResult.to_dict() (metrics, market comparison, diagnostics)

  Raises:
    ValueError: If companies is empty
  '''
  companies = list(companies)
  if not companies:
    raise ValueError('companies cannot be empty')

  rows = []
  for i, company in enumerate(companies, 1):
    if verbose:
      logger.info('[%d/%d] Processing %s...', i, len(companies),
                  company.ticker)

    result = run_valuation(company, config)
    rows.append(result.to_dict())

    for name in result.failed_metrics:
      logger.warning('%s: %s unavailable: %s', company.ticker, name,
                     result.diag.get(f'{name}_reason'))

    if verbose and result.iv_per_share is not None:
      mos = result.margin_of_safety
      logger.info('  IV: $%.2f, MoS: %s', result.iv_per_share,
                  'n/a' if mos is None else f'{mos * 100:.1f}%')

  return pd.DataFrame(rows)


def load_companies(file_path: Path) -> List[CompanyFundamentals]:
  '''
  Load a JSON list of company objects.

  Raises:
    FileNotFoundError: If the file does not exist
    ValueError: If the file is not a JSON list of valid company objects
  '''
  if not file_path.exists():
    raise FileNotFoundError(f'Companies file not found: {file_path}')

  with open(file_path, 'r', encoding='utf-8') as f:
    try:
      data = json.load(f)
    except json.JSONDecodeError as e:
      raise ValueError(f'Invalid JSON in {file_path}: {e}') from e

  if not isinstance(data, list):
    raise ValueError(f'Expected a JSON list in {file_path}')
  return [CompanyFundamentals.from_dict(item) for item in data]


def _print_summary(df: pd.DataFrame) -> None:
  '''Log summary statistics for batch valuation results.'''
  total = len(df)
  valued = df[df['iv_per_share'].notna()]

  logger.info('=' * 70)
  logger.info('Summary Statistics')
  logger.info('=' * 70)
  logger.info('Total companies: %d', total)
  logger.info('Valued: %d', len(valued))

  if not valued.empty:
    logger.info('Intrinsic Value per Share:')
    logger.info('  Median: $%.2f', valued['iv_per_share'].median())
    logger.info('  Min:    $%.2f (%s)', valued['iv_per_share'].min(),
                valued.loc[valued['iv_per_share'].idxmin(), 'ticker'])
    logger.info('  Max:    $%.2f (%s)', valued['iv_per_share'].max(),
                valued.loc[valued['iv_per_share'].idxmax(), 'ticker'])

  priced = valued[valued['margin_of_safety'].notna()]
  if not priced.empty:
    undervalued = priced[priced['margin_of_safety'] > 0]
    logger.info('Undervalued (MoS > 0): %d / %d', len(undervalued),
                len(priced))
    for _, row in undervalued.nlargest(5, 'margin_of_safety').iterrows():
      logger.info('  %s: IV=$%.2f, Price=$%.2f, MoS=%.1f%%', row['ticker'],
                  row['iv_per_share'], row['market_price'],
                  row['margin_of_safety'] * 100)

  logger.info('=' * 70)


def main() -> int:
  '''CLI entrypoint for batch valuation.'''
  parser = argparse.ArgumentParser(
      description='Batch valuation for multiple companies',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog=__doc__,
  )
  parser.add_argument('--companies',
                      type=Path,
                      required=True,
                      help='JSON file with a list of company fundamentals')
  add_scenario_arguments(parser)
  parser.add_argument('--output',
                      type=Path,
                      required=True,
                      help='Output CSV file path')
  parser.add_argument('-v',
                      '--verbose',
                      action='store_true',
                      help='Verbose output')

  args = parser.parse_args()

  logging.basicConfig(
      level=logging.DEBUG if args.verbose else logging.INFO,
      format='%(asctime)s [%(levelname)s] %(message)s',
      datefmt='%Y-%m-%d %H:%M:%S',
  )

  try:
    companies = load_companies(args.companies)
  except (FileNotFoundError, ValueError) as e:
    logger.error('%s', e)
    return 1

  config = build_config(args)
  logger.info('Loaded %d companies from %s', len(companies), args.companies)
  logger.info('Using scenario: %s', config.name)

  results = batch_valuation(companies, config, verbose=args.verbose)

  args.output.parent.mkdir(parents=True, exist_ok=True)
  results.to_csv(args.output, index=False)
  logger.info('Saved %d results to %s', len(results), args.output)

  _print_summary(results)
  return 0


if __name__ == '__main__':
  sys.exit(main())
