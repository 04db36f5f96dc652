"""Command-line interface for Simplo Pages."""
