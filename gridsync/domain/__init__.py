"""
Domain layer package.

Contains pure spreadsheet logic: cell references, the formula engine,
port interfaces and errors. No framework imports, no IO.
"""
