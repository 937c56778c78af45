"""Processing modules for vadscope."""
