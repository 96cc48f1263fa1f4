"""Attendance time-accounting and payroll engine.

This package is organized by feature modules (attendance, payroll, employees)
with a thin Flask controller layer over plain service/repository layers.
"""
