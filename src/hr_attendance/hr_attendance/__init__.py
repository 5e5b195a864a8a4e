"""HR attendance engine package.

This package is organized by feature modules (schedules, holidays, attendance,
corrections, ...) with repository protocols and service layers. Storage is
pluggable: MySQL repositories ship with the package, tests use in-memory ones.
"""
