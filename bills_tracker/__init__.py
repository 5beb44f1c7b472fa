"""
Bills Tracker - Source Package

A small personal bill tracker for recurring monthly expenses.
Bills are recorded once with a due day, marked paid month by month,
and summarised as totals and a category breakdown.

DESIGN PRINCIPLES:
1. One owned collection, saved whole after every change
2. Derived numbers are recomputed from the full list, never cached
3. Bad input is rejected at the boundary, never silently fixed
4. Every mutation is audited
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Bills Tracker Team"
