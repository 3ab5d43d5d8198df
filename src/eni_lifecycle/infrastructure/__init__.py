"""Technical infrastructure: logging, error classification and polling."""
