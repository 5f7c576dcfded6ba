"""Business logic for guest links and guest uploads."""
