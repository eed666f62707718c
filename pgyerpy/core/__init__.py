"""Core components: request encoding, HTTP layer and upload flow."""
