"""
certengine - Certificate Integrity & Verification Engine

Issues, anchors and verifies digital certificates:
- Deterministic Keccak-256 fingerprints of certificate content
- Merkle aggregation of fingerprints for batch anchoring
- Ledger reconciliation that degrades instead of failing
- Badge classification of every verification attempt
- Fail-open audit ingestion for sensitive actions
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
