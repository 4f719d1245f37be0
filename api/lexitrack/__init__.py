"""Lexitrack: SRS vocabulary tracker for a conversational language tutor."""
