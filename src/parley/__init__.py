"""Parley: two-person direct messaging with live delivery."""
