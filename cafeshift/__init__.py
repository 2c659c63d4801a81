"""CafeShift: scheduling, shift trading, time off and payroll for café branches."""

__version__ = "1.0.0"
