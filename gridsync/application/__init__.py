"""
Application layer package.

Contains the evaluation service that orchestrates the formula engine
and the spreadsheet store. Depends on domain ports, never on
infrastructure.
"""
