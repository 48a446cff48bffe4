"""Service layer for the Parley messaging core."""
