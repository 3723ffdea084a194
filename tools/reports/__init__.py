"""Reports

Read-only report writers.

Design:
- Never touches wallets / projects / logs, only reads what the assembler
  hands over.
- Writes output into ./reports/ (or the configured REPORTS_DIR).
"""
