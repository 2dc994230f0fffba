from __future__ import annotations


class InvalidConfiguration(ValueError):
    """A run-time parameter lies outside its physically sane range.

    Raised during setup, before the simulation loop takes its first tick.
    """


class ScenarioError(RuntimeError):
    """Scenario setup could not satisfy its placement constraints."""
