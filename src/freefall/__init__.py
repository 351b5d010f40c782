"""freefall: free-fall trajectories in flat and curved spacetime."""

__version__ = "0.4.0"
