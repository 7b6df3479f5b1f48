"""Verified binary asset provisioning."""
