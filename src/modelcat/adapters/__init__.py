"""Source adapters and the snapshot file codec."""
