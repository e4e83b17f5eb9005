"""
Time Series Quality

Quality assessment and gap repair for irregularly sampled time series.
Produces a cleaned, interpolated series together with completeness,
consistency, timeliness and validity scores.
"""

__version__ = "0.1.0"
