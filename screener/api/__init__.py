"""HTTP access to the screener backend."""
