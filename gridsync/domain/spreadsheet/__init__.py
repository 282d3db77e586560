"""
Spreadsheet bounded context: domain layer.

- Domain error codes and the success/failure Result type
- Cell reference parsing and relative-reference shifting
- Formula parsing and evaluation
- The dependency-tracking Spreadsheet engine
"""
