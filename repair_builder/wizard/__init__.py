"""Multi-step manual wizard."""
