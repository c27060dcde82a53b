"""Figures for sampled multiplication experiments."""
