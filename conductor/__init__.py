"""Conductor -- master project membership and rebuild coordination."""
