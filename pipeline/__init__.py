"""Cleaning, typing and profiling of tabular business records."""
