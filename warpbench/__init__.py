"""Object-storage benchmark toolkit: data generators, operation analysis and workload distributions."""

__version__ = "0.1.0"