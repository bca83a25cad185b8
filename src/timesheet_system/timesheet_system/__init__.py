"""Timesheet System package.

Feature modules (attendance, timelogs, projects, users) each carry a thin Flask
controller, a service layer holding the use cases and repository interfaces
with MySQL implementations.
"""
