"""Command-line maintenance scripts (run with python -m folio.scripts.<name>)."""
