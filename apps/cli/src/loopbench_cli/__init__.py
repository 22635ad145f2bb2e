"""Command line front end for loopbench."""
