"""Shared configuration and domain types."""
