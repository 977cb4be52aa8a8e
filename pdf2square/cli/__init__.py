"""Command-line interface for pdf2square."""
