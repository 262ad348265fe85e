"""Delivery submission resource."""
