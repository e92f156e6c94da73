"""GUI helpers: paths, icons and log forwarding."""
