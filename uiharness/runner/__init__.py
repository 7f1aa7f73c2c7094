"""Test-execution lifecycle: scoped sessions, failure diagnostics and reporting."""
