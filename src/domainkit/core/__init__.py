"""Errors, ids, clocks and settings shared by every domainkit module."""
