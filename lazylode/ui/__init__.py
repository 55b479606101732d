"""Textual front end for lazylode."""
