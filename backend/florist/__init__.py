"""
FlowerCost core: product costs, markup pricing, arrangement recipes,
order history and POS handoff for retail florists.
"""

__version__ = "1.0.0"
