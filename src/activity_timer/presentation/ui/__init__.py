"""System tray front end."""
