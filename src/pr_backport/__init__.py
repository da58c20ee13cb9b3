"""Backport merged pull requests to maintenance branches named by labels."""
