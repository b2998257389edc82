"""Core module for lss: models, errors, logging, ignores and the scanner."""
