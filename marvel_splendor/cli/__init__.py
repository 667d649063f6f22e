"""Command-line interface for inspecting Marvel Splendor states."""
