"""SWU Price Sync: Star Wars: Unlimited price report and Square catalog feed."""

__version__ = "0.1.0"
