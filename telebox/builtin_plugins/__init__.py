"""Plugins shipped with telebox, loaded after the user's plugin directory."""
