"""
Anomaly detection package.
"""

from .service import AnomalyDetector, anomaly_detector

__all__ = ["AnomalyDetector", "anomaly_detector"]
