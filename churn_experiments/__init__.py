"""
Churn Experiments: Localization Under Access Point Turnover

Runnable examples exercising the wifisim package:
    - Centroid family under FIFO churn
    - Fingerprinting family under random churn
    - Both families side by side
    - Characterization of the radio propagation model
"""

__version__ = "0.1.0"
__all__ = []
