"""Core engine components: configuration, logging, hooks and feature evaluation."""
