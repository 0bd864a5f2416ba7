"""Time-to-payroll reconciliation.

Moves approved hours from time clock punches, timesheet entries and
overtime requests into payroll work records, with an auditable and
reversible sync log per run.
"""

__version__ = "0.1.0"
