"""Scan requests and the paginated scan session."""
