"""
lilybear - addressed whisper bus for a council of agents, with an HTTP relay bridge
"""

__version__ = "0.2.0"
__logo__ = "🐻"
