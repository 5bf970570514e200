"""HTTP adapters for the PTB builder."""
