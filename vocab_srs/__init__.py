"""
vocab-srs: spaced-repetition scheduling core for vocabulary practice.

Decides which saved words are due, composes bounded practice sessions,
walks a session question by question and updates each word's memory model.
"""

__version__ = "1.0.0"
