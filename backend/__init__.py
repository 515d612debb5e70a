"""Runtime configuration and observability for the workout engine."""
