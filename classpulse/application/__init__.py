"""Application layer: HTTP/WebSocket surface and wiring."""
