'''
Buffett-style valuation formulas.

This package provides closed-form fundamental metrics (owner's earnings,
ROE, RONTA, debt-to-equity, EPS, EPS CAGR) and a two-stage DCF intrinsic
value. Engine functions are pure and return MetricOutput values instead of
raising, so every failure path is visible at the call site.

Usage:
  from buffett_valuation.engine import intrinsic_value_per_share

  result = intrinsic_value_per_share([100, 100, 100], 0.10, 0.02, 10)
  if result.ok:
    print(f'IV: ${result.value:.2f}')
  else:
    print(result.error, result.reason)

  # Full company report
  from buffett_valuation.run import run_valuation
  from buffett_valuation.scenarios.config import ScenarioConfig

  report = run_valuation(fundamentals, ScenarioConfig.conservative())
'''
