"""
Converge - convergence engine for cluster-owned cloud state.

- converge.network: elastic IP allocation, ownership tagging and safe release
- converge.iamauth: additive convergence of IAM identity mappings
- converge.execution: backoff policies and the retry executor
- converge.core: errors, settings, logging and collaborator protocols
"""

__version__ = "0.1.0"
