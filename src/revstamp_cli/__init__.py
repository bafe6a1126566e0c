"""Command-line front end for revstamp."""
