"""Terminal user interface: live dashboard, popups and the text report."""
