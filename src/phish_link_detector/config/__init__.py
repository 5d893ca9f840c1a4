"""Detector configuration."""
