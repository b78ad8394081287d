"""Remote hub: mirrors agent snapshots to browsers and relays their commands back."""
