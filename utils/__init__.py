"""Dataset client and chart renderers."""
