"""Typed WeCom API endpoint functions."""
