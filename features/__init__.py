"""Gateway features: media understanding and inbound message handling."""
