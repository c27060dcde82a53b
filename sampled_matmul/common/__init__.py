"""Shared configuration, logging, metrics and synthetic data helpers."""
