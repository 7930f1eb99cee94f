"""
Gradual Dutch Auctions (GDA)

A pricing and settlement engine for gradual token sales:
- Fixed-point exponential math with explicit error bounds
- Continuous and discrete GDA price curves
- Single-item linear Dutch auctions
- Atomic, exactly-once settlement against external asset ledgers
"""

__version__ = "0.1.0"
