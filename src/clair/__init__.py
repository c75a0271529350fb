"""Startup configuration for the Clair vulnerability scanner service."""
