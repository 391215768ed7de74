"""Travel planner: streaming plan generation, JSON recovery and saved plans."""

__version__ = "1.0.0"
