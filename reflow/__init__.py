"""Production schedule reflow.

Reschedules a batch of work orders across work centers so that
dependencies, weekly shifts and maintenance blackouts are respected while
keeping each order as close as possible to its requested time.
"""

__version__ = "0.1.0"
