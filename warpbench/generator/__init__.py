"""Synthetic object data sources for benchmarks: random and CSV data with seekable readers."""