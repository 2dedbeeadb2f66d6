"""Residence registration review service."""
