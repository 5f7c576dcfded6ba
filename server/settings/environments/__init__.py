"""Environment specific settings overlays."""
