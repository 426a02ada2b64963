"""Core pipeline services: timestamps, discovery, logging, errors, metrics."""
