"""
Venue event lifecycle engine: status rules, application workflow, statistics,
and a controller that keeps local projections in step with the LocationEvent API.
"""

__version__ = "1.0.0"
