"""
VendorGate - Vendor/Client Compliance Onboarding

Scores uploaded compliance documents (SOC2, ISO27001, audit reports,
insurance certificates) with a generative model and only materializes a
user account once the aggregate result passes.
"""

__version__ = "0.1.0"
__author__ = "VendorGate"
__email__ = "dev@vendorgate.example"

# Import only the types to avoid circular imports
from .types import ComplianceFinding, ComplianceResult, AuditReport

__all__ = [
    "ComplianceFinding",
    "ComplianceResult",
    "AuditReport",
]
