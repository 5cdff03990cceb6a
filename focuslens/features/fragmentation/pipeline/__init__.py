"""
Pipeline components for the fragmentation feature.

Scoring, anomaly detection, trend aggregation, and reporting metrics.
Subpackages expose the primary services that other layers use.
"""

__all__ = ["anomaly", "metrics", "scoring", "trends"]
