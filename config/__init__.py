"""Gateway configuration: provider API keys and media understanding defaults."""
