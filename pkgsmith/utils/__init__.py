"""Shared utilities for pkgsmith."""
