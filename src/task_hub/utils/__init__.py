"""Utility helpers for Task Hub."""
