"""Utilities package for the Cocktail Porter application."""
