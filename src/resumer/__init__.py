"""
resumer: Resumable, interruptible iteration for background jobs.

A job describes its work as a lazy sequence of (item, cursor) pairs. The
engine drives that sequence in bounded time slices and hands back the cursor
of the last completed item, so a re-enqueued job continues where it stopped.
"""

__version__ = "0.1.0"
