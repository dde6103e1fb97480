"""Cross-cutting concerns: errors, access control, security, observability."""
