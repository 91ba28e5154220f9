"""Tests for the process comparison engine."""
