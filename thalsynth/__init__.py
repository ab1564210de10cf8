"""
thalsynth

Synthetic thalassemia screening panels with utility and privacy scoring.

- Signature-preserving record synthesis (calibrated noise, biased sampling)
- Distribution overlap between original and synthetic data
- Re-identification, attribute disclosure and rare-combination risk
- MCP server for generation and reporting
"""

__version__ = "0.1.0"
