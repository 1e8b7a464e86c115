"""Timesheet System package.

Feature modules (periods, users, projects, timesheets, entries, reports) each
pair a repository protocol with a MySQL implementation, a service holding the
rules, and a thin Flask controller.
"""
