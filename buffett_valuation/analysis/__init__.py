'''
Valuation analysis utilities.

Note: To avoid RuntimeWarning when using -m flag, import directly:
  from buffett_valuation.analysis.batch_valuation import batch_valuation
  from buffett_valuation.analysis.sensitivity import SensitivityTableBuilder
'''
