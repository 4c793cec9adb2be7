"""Utility helpers for the candidacy graph."""
