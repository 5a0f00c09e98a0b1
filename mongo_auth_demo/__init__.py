"""
MongoDB authentication demos.

Builds driver connection plans for password, X.509 certificate, AWS IAM,
Atlas API key and OIDC service account authentication, and runs a short
operation sequence against the server, or a simulated walkthrough when
credentials are missing.
"""

__version__ = "0.1.0"
