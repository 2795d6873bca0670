"""GitHub Actions build monitoring helpers."""
