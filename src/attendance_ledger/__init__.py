"""Attendance Ledger package.

Attendance aggregation and leave ledger engine, organized by feature modules
(schedules, attendance, leave, requests, ...) with thin Flask controllers on
top of plain service/repository layers.
"""
