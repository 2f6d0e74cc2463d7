"""Vocabulary lifecycle and spaced-repetition review."""
