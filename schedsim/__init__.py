"""
Scheduler simulator package.

Simulates a single CPU under FCFS, SRTF, preemptive priority and round-robin
scheduling and reports per-process and system metrics.
"""

__all__ = ["cli"]
