"""Workforce engine package.

Reconciles clock events, shifts, working-day calendars and approved leave into
daily attendance and monthly salary slips. Organized by feature modules
(calendars, shifts, attendance, summaries, payroll) with a thin Flask
controller layer over service/repository layers.
"""
