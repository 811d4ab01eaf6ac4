"""Services module.

- exceptions: base service exceptions mapped to HTTP responses
- sequences: sequence configs, identifier allocation and reformatting
- machines: machine records and identifier uniqueness
- categories: category lookup
"""
