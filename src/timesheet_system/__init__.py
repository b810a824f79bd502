"""Timesheet System package.

Organized by feature modules (timeclock, approvals, timesheets, exports, ...)
with a thin Flask controller layer over service/repository layers.
"""
