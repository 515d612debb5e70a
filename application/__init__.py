"""
Application layer for the workout generator.

This package contains:
- exceptions.py: Errors raised by the generation services
- ports/: Protocols for the external collaborators the engine talks to
"""
