"""Bid estimating and forecast engine: win forecasts per project type and OH&P recommendations."""
