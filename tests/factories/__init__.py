"""Test factories for stylecast models."""
