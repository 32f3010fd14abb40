"""Recorded benchmark operations, size segments, their CSV format and workload distributions."""