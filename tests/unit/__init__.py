"""Unit tests for the tracker's core components."""
