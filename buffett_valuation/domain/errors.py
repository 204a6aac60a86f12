"""
Exceptions raised when a failed MetricOutput is unwrapped.

Engine functions report domain failures as MetricOutput values. These types
exist for callers that prefer exceptions (see MetricOutput.unwrap).
"""


class ValuationError(Exception):
  """Base class for valuation domain failures."""


class InvalidInputError(ValuationError, ValueError):
  """An argument violates a domain precondition."""


class DivisionByZeroError(ValuationError, ZeroDivisionError):
  """A denominator is exactly zero where the metric is undefined."""
