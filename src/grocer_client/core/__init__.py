"""Core value types and the error taxonomy."""
