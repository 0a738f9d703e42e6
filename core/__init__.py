"""Shared configuration and exceptions for RuleWeave."""
