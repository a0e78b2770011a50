"""Command line front end for the A4 page builder."""
