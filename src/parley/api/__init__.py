"""HTTP and WebSocket boundary of the Parley application."""
