"""
Florist services: pricing, matching, recipe analysis, inventory,
persistence coordination, POS handoff and analytics.
"""
