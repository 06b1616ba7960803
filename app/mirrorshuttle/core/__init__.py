"""Core services for mirrorshuttle.

Configuration, errors, logging, cancellation and the mode runner.
"""
