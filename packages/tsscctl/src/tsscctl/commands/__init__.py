"""Tsscctl sub-commands."""
